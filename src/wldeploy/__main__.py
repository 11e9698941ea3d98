"""Allow `python -m wldeploy`."""
from wldeploy import main

main()
