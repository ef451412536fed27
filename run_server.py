#!/usr/bin/env python3
"""
Entry point for running the deploy webhook under systemd.
This file lets us avoid relying on `flask run` and keeps behavior consistent.

Config comes from DEPLOYHOOK_* env vars and/or the YAML file named by
DEPLOYHOOK_CONFIG (see deployhook/config.py).
"""

import sys

from deployhook.app import create_app
from deployhook.config import ConfigError, load_config


def main():
    try:
        config = load_config().validate()
    except (ConfigError, OSError) as e:
        print(f"[startup] bad config: {e}", file=sys.stderr)
        return 1

    print(f"[startup] {config!r}")
    app = create_app(config)
    # threaded so /health and busy rejections answer while a deploy runs
    # debug=False so we don't do autoreload loops under systemd
    app.run(host=config.host, port=config.port, debug=False, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
