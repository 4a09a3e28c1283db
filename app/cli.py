# app/cli.py
import argparse, json, time, sys
from pathlib import Path

from app.orchestrator import run_analysis
from common.errors import DecodeError
from utils.metrics import init_metrics


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Voice tone inference: tag a recording with an emotional tone")
    sub = p.add_subparsers(dest="cmd", required=True)

    anp = sub.add_parser("analyze", help="Analyze one audio file and print the result as JSON")
    anp.add_argument("--audio", required=True)
    anp.add_argument("--pretty", action="store_true")
    anp.add_argument("--seed", type=int, default=None, help="Pin jitter for reproducible output")
    anp.add_argument("--explain", action="store_true", help="Include features and candidate scores")
    anp.add_argument("--run-id", type=str, default=None)

    servep = sub.add_parser("serve", help="Expose /metrics and keep running")
    servep.add_argument("--metrics-port", type=int, default=9000)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.cmd == "analyze":
        path = Path(args.audio)
        try:
            data = path.read_bytes()
        except OSError as exc:
            print(f"error: cannot read {path}: {exc}", file=sys.stderr)
            return 2
        try:
            out = run_analysis(data, filename=path.name, run_id=args.run_id, seed=args.seed, explain=args.explain)
        except DecodeError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(json.dumps(out, ensure_ascii=False, indent=2) if args.pretty else json.dumps(out, ensure_ascii=False))
        return 0

    if args.cmd == "serve":
        init_metrics(args.metrics_port)
        print(f"[metrics] exposed on http://localhost:{args.metrics_port}/metrics. Ctrl+C to exit.")
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            print("\n[exit on Ctrl+C]")
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
