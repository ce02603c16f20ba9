"""Test suite for docweave.

Tests mirror the source layout: styles/, processing/, annotations/,
internals/ and pipelines/, with CLI and entry point tests at the top level.

Running Tests:
    pytest                                  # Run all tests
    pytest -v                               # Verbose output
    pytest tests/processing                 # Run one area
    pytest -k "comment"                     # Run tests with matching pattern in function name

Debugging Tests:
    - Use breakpoint() in test code, then run with pytest -s
    - Use pytest --pdb to drop into debugger on failure

Notes:
    - conftest.isolated_user_dirs redirects ~/Documents/docweave to tmp_path for every test
    - Sample .docx files are built with python-docx inside tmp_path, nothing is checked in
    - Monkeypatch for changing values (sys.argv, env vars), mock.patch for spying on calls
"""
