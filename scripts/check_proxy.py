"""Manual script to verify the generation proxy server is reachable."""

from __future__ import annotations

import argparse

import requests

from config.settings import load_config


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the PHIXO proxy server.")
    parser.add_argument("--imagen", action="store_true", help="also run one Imagen-4 generation (costs provider quota)")
    args = parser.parse_args()

    config = load_config()  # reads .env into os.environ
    base_url = config.proxy_url

    try:
        resp = requests.get(f"{base_url}/health", timeout=10)
        print("Health status:", resp.status_code)
        print(resp.text[:300])
        if not resp.ok:
            return 1

        if args.imagen:
            gen = requests.post(
                f"{base_url}/api/imagen4-generate",
                json={"prompt": "A ceramic coffee cup on a wooden table", "aspectRatio": "1:1"},
                timeout=config.request_timeout,
            )
            print("Generation status:", gen.status_code)
            body = gen.json() if gen.headers.get("content-type", "").startswith("application/json") else {}
            print("Image URL:", body.get("imageUrl") or gen.text[:300])
    except requests.RequestException as exc:
        print("[error]", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
