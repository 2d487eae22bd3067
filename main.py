"""
Main entry point for AirHands.

This script delegates to the scripted demo in `air_hands.demo`.
Run `python main.py` or the `air-hands-demo` console script.
"""

from air_hands.demo import main

if __name__ == "__main__":
    main()
