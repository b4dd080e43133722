import sys

from sitecache.cli import main

sys.exit(main())
