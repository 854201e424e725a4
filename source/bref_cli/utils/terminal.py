# ABOUTME: Raw output forwarding for text produced by remote functions and containers
# ABOUTME: Bypasses rich rendering so tabs, carriage returns and emoji codes reach the terminal unchanged

from rich.console import Console


def write_verbatim(console: Console, text: str) -> None:
    """Write text to the console's stream exactly as given."""
    console.file.write(text)
    console.file.flush()
