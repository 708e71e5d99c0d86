"""Tests for the uvicorn entry point."""

from unittest.mock import patch

from filterstudio.__main__ import main


class TestMain:
    """Tests for python -m filterstudio."""

    @patch("filterstudio.__main__.uvicorn.run")
    def test_defaults(self, mock_run, monkeypatch):
        monkeypatch.delenv("HOST", raising=False)
        monkeypatch.delenv("PORT", raising=False)

        main()

        mock_run.assert_called_once_with("filterstudio.main:app", host="0.0.0.0", port=8000)

    @patch("filterstudio.__main__.uvicorn.run")
    def test_host_and_port_from_env(self, mock_run, monkeypatch):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9001")

        main()

        mock_run.assert_called_once_with("filterstudio.main:app", host="127.0.0.1", port=9001)
