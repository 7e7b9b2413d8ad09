# Configuration file for the Sphinx documentation builder.

# -- Project information -----------------------------------------------------

project = "sampleview"
copyright = "2025, sampleview developers"
author = "sampleview developers"
release = "0.1.0"

# -- General configuration ---------------------------------------------------

extensions = [
    "myst_parser",
]

templates_path = ["_templates"]
exclude_patterns = []

# Use Markdown as source format
source_suffix = {
    ".md": "markdown",
}

root_doc = "index"

# -- Options for HTML output -------------------------------------------------

html_theme = "sphinx_rtd_theme"

# Build locally from the repository root:
# pip install -e ".[docs]"
# sphinx-build -b html docs/source docs/build/html
