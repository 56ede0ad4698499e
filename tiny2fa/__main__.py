import sys

from tiny2fa.otp_cli import main

sys.exit(main())
