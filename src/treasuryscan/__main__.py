import sys

from treasuryscan.runner import main

sys.exit(main())
