"""Package entry point for ``python -m gemini_captioner``.

WHY: Users run the captioner as ``python -m gemini_captioner input.mp3``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from gemini_captioner.cli import main

if __name__ == "__main__":
    main()
