from referrercop.cli import app

app()
