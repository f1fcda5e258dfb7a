"""
Unit tests for the server entry point in main.py
"""

import main


class FakeApp:

    def __init__(self):
        self.run_kwargs = None

    def run(self, **kwargs):
        self.run_kwargs = kwargs


class TestStartup:

    def test_invalid_word_list_stops_startup(self, monkeypatch, capsys):
        def invalid():
            raise ValueError("Duplicate words found in word list: ['CRANE']")

        def unexpected(*args, **kwargs):
            raise AssertionError('services should not be initialized')

        monkeypatch.setattr(main, 'validate_word_list_integrity', invalid)
        monkeypatch.setattr(main, 'initialize_services', unexpected)

        assert main.main('testing') == 1
        assert "✗ Word list failed validation: Duplicate words found" in capsys.readouterr().out

    def test_valid_word_list_starts_server(self, monkeypatch, capsys):
        app = FakeApp()
        monkeypatch.setattr(main, 'create_app', lambda config_class: app)

        assert main.main('testing') == 0
        out = capsys.readouterr().out
        assert "✓ Game service initialized successfully" in out
        assert "✓ Startup sync: skipped" in out
        assert app.run_kwargs['debug'] is True
