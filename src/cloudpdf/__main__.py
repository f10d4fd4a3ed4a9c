"""Allow ``python -m cloudpdf``."""

from cloudpdf.cli import main

raise SystemExit(main())
