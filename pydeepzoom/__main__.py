import argparse
import logging


def main():
    parser = argparse.ArgumentParser(
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--dims",
        type=int,
        default=[1200, 900],
        nargs=2,
        help="The window dimensions, in pixels",
    )
    parser.add_argument(
        "--imax",
        type=int,
        default=500,
        help="the max iterations to start with",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=4,
        help="render the preview at 1/SCALE of the window resolution",
    )
    parser.add_argument(
        "--coords",
        default=None,
        help=(
            "start at exported coordinates, e.g. "
            "'X: -0.75\\nY: 0.1\\nZoom: 0.01' or '-0.75,0.1,0.01'"
        ),
    )
    parser.add_argument(
        "--adaptive",
        action="store_true",
        help="raise the iteration budget automatically as the view zooms in",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="log dropped events and clamped values",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    from .config import EngineConfig
    from .engine import ViewportEngine
    from .snapshot import CoordinateFormatError
    from .state import CameraParams
    from .viewer import ZoomViewer

    width, height = args.dims
    engine = ViewportEngine(
        config=EngineConfig(adaptive_iterations=args.adaptive),
        width=width,
        height=height,
        defaults=CameraParams(max_iterations=max(1, args.imax)),
    )
    if args.coords:
        try:
            engine.import_coordinates(args.coords.replace("\\n", "\n"))
        except CoordinateFormatError as exc:
            parser.error(str(exc))

    print(f"dims: {args.dims}")
    print(f"imax: {args.imax}")
    print(f"start:\n{engine.export_coordinates()}")

    ZoomViewer(width, height, engine=engine, preview_scale=args.scale).run()


if __name__ == "__main__":
    main()
