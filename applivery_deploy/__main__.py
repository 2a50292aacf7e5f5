import sys

from applivery_deploy.main import main

sys.exit(main())
