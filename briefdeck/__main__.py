import sys

from briefdeck.cli import main

sys.exit(main())
