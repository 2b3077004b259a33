import argparse

from .config import SessionSettings, get_preset
from .level_gen import FileLevelProvider, ProceduralLevelProvider


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="soarscape", description="Arcade obstacle game")
    parser.add_argument("--preset", default="default", help="Config preset name.")
    parser.add_argument("--mode", default="flap", choices=["flap", "runner"])
    parser.add_argument("--difficulty", default="medium", choices=["easy", "medium", "hard"])
    parser.add_argument("--layout-file", help="Layout JSON file, or a directory of <difficulty>.json files.")
    parser.add_argument(
        "--procedural-levels",
        action="store_true",
        help="Generate flap layouts with the offline level generator.",
    )
    parser.add_argument("--best-score-file", help="JSON file for persisted best scores.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the offline level generator.")
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Run briefly and exit (for quick verification).",
    )
    args = parser.parse_args(argv)

    config = get_preset(args.preset)
    if args.best_score_file:
        config.best_score_path = args.best_score_file

    provider = None
    if args.layout_file:
        provider = FileLevelProvider(args.layout_file)
    elif args.procedural_levels:
        provider = ProceduralLevelProvider(config, seed=args.seed)

    # Imported late so --help works without a display
    from .engine import ArcadeEngine

    engine = ArcadeEngine(
        config,
        settings=SessionSettings(args.mode, args.difficulty),
        level_provider=provider,
    )
    if args.smoke:
        engine.begin()
    engine.run(max_frames=120 if args.smoke else None)


if __name__ == "__main__":
    main()
