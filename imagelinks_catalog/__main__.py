import sys

from imagelinks_catalog.main import main

if __name__ == "__main__":
    sys.exit(main())
