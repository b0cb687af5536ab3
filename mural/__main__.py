"""Command line entry point.

    python -m mural serve [--seed N]
    python -m mural snapshot --seconds S --out frame.png [--local]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from mural.config import settings


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.mural_log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    from mural.main import app
    from mural.store.memory import get_entry_store, seed_store

    if args.seed is not None:
        seed_store(get_entry_store(), seed=args.seed)

    print(f"Starting Echo store on http://{args.host}:{args.port}")
    print(f"Docs available at: http://{args.host}:{args.port}/docs")
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


async def _snapshot(args: argparse.Namespace) -> bool:
    import httpx

    from mural.client.identity import load_or_create_user_id
    from mural.client.store_client import MuralStoreClient
    from mural.engine.controller import MuralController
    from mural.render.painter import MuralPainter
    from mural.render.surface import RasterSurface

    if args.local:
        from mural.main import create_app
        from mural.store.memory import reset_entry_store, seed_store

        seed_store(reset_entry_store(), seed=args.seed)
        client = MuralStoreClient(
            "http://mural.local", transport=httpx.ASGITransport(app=create_app())
        )
    else:
        client = MuralStoreClient(args.store_url)

    user_id = load_or_create_user_id(settings.user_id_file)
    surface = RasterSurface(args.width, args.height, args.dpr)
    controller = MuralController(
        client,
        user_id,
        viewport=(args.width, args.height),
        device_pixel_ratio=args.dpr,
        painter=MuralPainter(surface, user_id),
        fps=settings.frames_per_second,
        poll_entries_seconds=settings.poll_entries_seconds,
        poll_resonances_seconds=settings.poll_resonances_seconds,
    )

    async with client:
        ok = await controller.mount()
        await asyncio.sleep(args.seconds)
        controller.frame(controller.clock())
        surface.save(args.out)
        print(f"{len(controller.state)} blobs, {controller.frame_count} frames → {args.out}")
        await controller.unmount()
        await controller.drain()
    return ok


def snapshot(args: argparse.Namespace) -> int:
    ok = asyncio.run(_snapshot(args))
    if not ok:
        print("Could not load the mural.")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    _configure_logging()

    parser = argparse.ArgumentParser(prog="mural", description="Echo mural engine and store")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the in-memory entry store over HTTP")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--seed", type=int, default=None, help="Fill with demo entries (RNG seed)")
    p_serve.set_defaults(func=serve)

    p_snap = sub.add_parser("snapshot", help="Run the mural for a while and save the last frame")
    p_snap.add_argument("--seconds", type=float, default=3.0)
    p_snap.add_argument("--out", default="mural.png")
    p_snap.add_argument("--store-url", default=settings.store_url)
    p_snap.add_argument("--local", action="store_true", help="Use a seeded in-process store")
    p_snap.add_argument("--seed", type=int, default=0, help="Demo data seed for --local")
    p_snap.add_argument("--width", type=float, default=settings.viewport_width)
    p_snap.add_argument("--height", type=float, default=settings.viewport_height)
    p_snap.add_argument("--dpr", type=float, default=settings.device_pixel_ratio)
    p_snap.set_defaults(func=snapshot)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
