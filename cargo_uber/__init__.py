"""cargo-uber: aggregate independently cloned Cargo trees into one workspace."""

__version__ = "0.1.0"
