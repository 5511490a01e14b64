from __future__ import annotations

from taskledger.cli import main

if __name__ == "__main__":
    main()
