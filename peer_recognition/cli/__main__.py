import sys

from peer_recognition.cli import main

sys.exit(main())
