#!/usr/bin/env python3
"""
garage-cli: S3 client for Garage / MinIO compatible storage

Reads S3_ENDPOINT, S3_ACCESS_KEY and S3_SECRET_KEY from the environment
(or a .env file).

Usage:
    python run.py upload my-bucket ./photos backups/photos -p 8
    python run.py download my-bucket backups/photos ./restore -r
    python run.py delete my-bucket backups/photos -r --dry-run
    python run.py delete my-bucket backups/photos -r --yes
    python run.py list my-bucket backups/
    python run.py presign my-bucket backups/photos/a.jpg -e 600
    python run.py -j result.json upload my-bucket report.pdf
"""

import sys
from garage_cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
