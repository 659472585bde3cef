import sys

from jiragantt.main import main

sys.exit(main())
