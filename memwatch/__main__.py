import sys

from memwatch.run_monitor import main

sys.exit(main())
