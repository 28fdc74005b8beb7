"""Playwright glue for the quiz explorer: browser session, page driver and payload capture."""
