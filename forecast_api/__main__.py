import sys

from forecast_api.cli import main

sys.exit(main())
