#!/usr/bin/env python3
"""
Huawei Cloud OBS command-line client

Run this script to manage buckets and objects without installing the
package.

Usage:
    python run.py -r la-south-2 list-buckets
    python run.py -r la-south-2 create -b my-bucket
    python run.py -r la-south-2 list-objects -b my-bucket -p logs/
    python run.py -r la-south-2 put -b my-bucket -f ./big.iso
    python run.py -r la-south-2 get -b my-bucket -o logs/app.log -d ./out
    python run.py -r la-south-2 rmbs -b old-1 old-2 old-3
"""

import sys
from obscli.cli import main

if __name__ == "__main__":
    sys.exit(main())
