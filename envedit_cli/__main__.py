"""Allow `python -m envedit_cli`."""
from envedit_cli.main import main

main()
