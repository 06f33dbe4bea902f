#!/usr/bin/python3

import sys

if __name__ == '__main__':
    if sys.version_info < (3, 10):
        print(f'Your python version {sys.version} is too old. ',
              'This program needs 3.10 or later')
        sys.exit(2)

    import gpsdo.config_util as config_util
    sys.exit(config_util.main())
