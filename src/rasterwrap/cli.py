# src/rasterwrap/cli.py
from __future__ import annotations

"""
CLI de rasterwrap (mosaicos y previews de GeoTIFF float32).

Comandos principales:
  - merge: une tiles del mismo tamaño/escala en un mosaico GeoTIFF.
  - export8u: exporta una banda como imagen Byte (PNG/JPEG/GIF/TIF).
  - info: resume tamaño, bandas, transform, UTM y origen custom.

Ejemplos rápidos:
  python -m rasterwrap.cli merge t1.tif t2.tif t3.tif -o mosaic.tif

  python -m rasterwrap.cli export8u mosaic.tif 0 preview.png
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .composition.di import build_io_service, build_settings
from .config import Settings
from .contracts.geo import pretty_transform
from .contracts.raster import RasterSet
from .log_helpers import setup_logger, shutdown_logger

logger = logging.getLogger(__name__)

# ----------------------
# Utilidades locales
# ----------------------

def _settings_from_args(args: argparse.Namespace) -> Settings:
    s = build_settings(Path(args.config) if args.config else None)
    upd: dict = {}
    if args.log_file:
        upd["log_file"] = Path(args.log_file)
    if args.verbose:
        upd["log_level"] = "DEBUG"
    return s.model_copy(update=upd) if upd else s


def _describe(r: RasterSet) -> str:
    lines = [
        f"{r!r}: {r.band_count} bandas",
        pretty_transform(r.transform, ndigits=6),
        f"UTM: zona {r.utm_zone} {'N' if r.utm_north else 'S'}" if r.utm_zone else "UTM: sin proyección",
        f"origen custom: ({r.custom_x_origin:f}, {r.custom_y_origin:f}, {r.custom_z_origin:f})",
    ]
    for i, name in enumerate(r.band_names()):
        lines.append(f"  banda {i}: {name or '-'}")
    return "\n".join(lines)


# ----------------------
# Comandos
# ----------------------

def cmd_merge(args: argparse.Namespace, s: Settings) -> int:
    svc = build_io_service(s)
    options = {} if args.no_compress else None
    svc.merge_files(args.tiles, args.out, no_data=args.no_data, options=options)
    print(str(args.out))
    return 0


def cmd_export8u(args: argparse.Namespace, s: Settings) -> int:
    svc = build_io_service(s)
    r = svc.load(args.input)
    svc.export8u(r, args.output, args.band)
    print(str(args.output))
    return 0


def cmd_info(args: argparse.Namespace, s: Settings) -> int:
    svc = build_io_service(s)
    print(_describe(svc.load(args.input)))
    return 0


# ----------------------
# Parser
# ----------------------

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rasterwrap", description="Mosaicos y previews de GeoTIFF float32")
    p.add_argument("--config", help="settings.yaml (si no, variables RASTERWRAP_* y defaults)")
    p.add_argument("--log-file", help="archivo de log adicional")
    p.add_argument("-v", "--verbose", action="store_true", help="logging DEBUG")
    sub = p.add_subparsers(dest="cmd", required=True)

    # merge
    pm = sub.add_parser("merge", help="une tiles en un mosaico")
    pm.add_argument("tiles", nargs="+", help="tiles GeoTIFF (mismo tamaño, escala y nº de bandas)")
    pm.add_argument("-o", "--out", required=True, help="GeoTIFF de salida")
    pm.add_argument("--no-data", type=float, default=None, help="relleno donde no cae ningún tile")
    pm.add_argument("--no-compress", action="store_true", help="no aplica el bundle DEFLATE")
    pm.set_defaults(func=cmd_merge)

    # export8u
    pe = sub.add_parser("export8u", help="exporta una banda como Byte (preview)")
    pe.add_argument("input", help="GeoTIFF de entrada")
    pe.add_argument("band", type=int, help="banda [0, n-1]")
    pe.add_argument("output", help="salida .png/.jpg/.gif/.tif")
    pe.set_defaults(func=cmd_export8u)

    # info
    pi = sub.add_parser("info", help="resumen del raster")
    pi.add_argument("input", help="GeoTIFF de entrada")
    pi.set_defaults(func=cmd_info)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    root = None
    try:
        s = _settings_from_args(args)
        root = setup_logger(str(s.log_file) if s.log_file else None, s.level())
        return int(args.func(args, s))
    except KeyboardInterrupt:
        return 130
    except Exception as ex:
        logger.error("[ERROR] %s", ex)
        logger.debug("detalle", exc_info=True)
        return 1
    finally:
        shutdown_logger(root)


if __name__ == "__main__":
    raise SystemExit(main())
