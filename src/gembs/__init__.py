"""gembs - a minimal, plugin-extensible build orchestrator.

Reads a project's build.json, expands its source sets, binds a plugin to
every source extension in use, substitutes mnemonics into the declared build
steps and runs the steps in order against the bound plugins.
"""

__version__ = "0.1.0"
