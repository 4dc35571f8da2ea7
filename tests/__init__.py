"""Test suite package marker so nested modules import with qualified names."""
