import sys

from po_prefill import main

sys.exit(main())
