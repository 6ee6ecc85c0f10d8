import sys

from sunrise_batch.run_batch import main

if __name__ == "__main__":
    sys.exit(main())
