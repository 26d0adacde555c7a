# nuitka-project: --product-name=StoryFormatter
# nuitka-project: --file-description="Story to forum markup formatter"
# nuitka-project: --file-version=1.0.0
# nuitka-project: --product-version=1.0.0

# nuitka-project: --standalone
# nuitka-project: --output-filename=storyformatter.exe
# nuitka-project: --output-dir=./dist/

# nuitka-project: --windows-console-mode=attach
# (disable/force/attach/hide)

# nuitka-project: --enable-plugin=tk-inter

# include the starter configuration
# nuitka-project: --include-data-dir=storyformat/resources/templates=storyformat/resources/templates

# nuitka-project: --follow-imports

"""
Entry point for .exe compilers.
"""

from storyformat.main import main

if __name__ == "__main__":
    main()
