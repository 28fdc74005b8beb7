import asyncio
import argparse
import logging
import sys

from .config import ExplorerConfig
from .errors import ExplorationError
from .exploration_policy import ExplorationAgent


def main() -> None:
    parser = argparse.ArgumentParser(description="Exhaustively explore every answer combination of a web quiz")
    parser.add_argument("--url", help="Quiz entry URL")
    parser.add_argument("--headless", action="store_true", default=None, help="Run browser in headless mode")
    parser.add_argument("--state-file", help="Where the resumable exploration state is kept")
    parser.add_argument("--payload-dir", help="Directory for captured payload_<n>.json files")
    parser.add_argument("--out", help="Directory to save run artefacts")
    parser.add_argument("--max-artifacts", type=int, help="Stop after this many captured submissions")
    parser.add_argument("--checkpoint-every", type=int, help="Also save state every N steps")
    parser.add_argument("--fresh", action="store_true", help="Ignore any saved state and start from the root")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ExplorerConfig.from_env().with_overrides(
            start_url=args.url,
            headless=args.headless,
            state_file=args.state_file,
            payload_dir=args.payload_dir,
            output_dir=args.out,
            max_artifacts=args.max_artifacts,
            checkpoint_every=args.checkpoint_every,
            resume=False if args.fresh else None,
        )
    except ValueError as e:
        parser.error(str(e))

    agent = ExplorationAgent(config)
    print(f"Starting exploration of {config.start_url}")

    try:
        result = asyncio.run(agent.explore())
    except ExplorationError as e:
        print(f"Exploration failed: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Exploration finished ({result.reason.value}) after {result.steps} steps.")
    print("Payloads captured:", result.artifacts_captured)
    if result.stack_depth:
        print(f"Saved {result.stack_depth} pending decisions to {config.state_file}; rerun to continue.")


if __name__ == "__main__":
    main()
