#!/usr/bin/env python3
"""TimesUp entry point.

Run with:
    python main.py
    python -m timesup
"""

from timesup.__main__ import main


if __name__ == "__main__":
    main()
