"""Run the npm-deps CLI with ``python -m npmdeps``."""

from npmdeps.cli import main

raise SystemExit(main())
