#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from anxcloud.api import API, AsObjectChannel, Context, HTTPClient, ObjectChannel, Paged
from anxcloud.api.apis.core.v1 import Location


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="List Anexia Engine locations")
    p.add_argument("limit", nargs="?", type=int, default=20, help="locations per page")
    p.add_argument("--debug", action="store_true", help="log requests")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    ctx = Context.background()
    async with HTTPClient.from_env() as client:
        api = API(client)

        print("=" * 72)
        print(f"{'Code':8} | {'Name':40} | {'Lat':>8} | {'Lon':>8}")
        print("-" * 72)
        async with ObjectChannel() as channel:
            paging = Paged(1, args.limit, info=False)
            await api.list(ctx, Location(), paging, AsObjectChannel(channel))
            async for retrieve in channel:
                loc = Location()
                await retrieve(loc)
                lat = f"{loc.latitude:.3f}" if loc.latitude is not None else "-"
                lon = f"{loc.longitude:.3f}" if loc.longitude is not None else "-"
                print(f"{loc.code:8} | {loc.name[:40]:40} | {lat:>8} | {lon:>8}")
        print("=" * 72)

        if channel.error is not None:
            print(f"Listing stopped early: {channel.error}")


if __name__ == "__main__":
    asyncio.run(main())
