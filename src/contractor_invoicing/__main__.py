import sys

from contractor_invoicing.cli import main

sys.exit(main())
