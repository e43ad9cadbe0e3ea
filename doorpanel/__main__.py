import sys

from doorpanel.cli.main import main

sys.exit(main())
