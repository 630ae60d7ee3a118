"""Allow running as: python -m hedera"""
import sys

from dotenv import load_dotenv

load_dotenv()

from hedera.main import cli_main  # noqa: E402

if __name__ == "__main__":
    sys.exit(cli_main())
