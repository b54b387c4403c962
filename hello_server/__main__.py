"""Allow ``python -m hello_server``."""

from hello_server.main import main

raise SystemExit(main())
