import argparse
import pathlib
import sys
from fastapi import FastAPI
from .api.routes import router
from .controller.benchmark_loop import run_benchmark
from .profiling.extractor import COST_CENTRE_NAMES
from .report.driver import compare_results, report_results

def make_app():
    app = FastAPI(title="Compiler Benchmark API")
    app.include_router(router)
    return app

# Create the app instance for uvicorn
app = make_app()

def _cli(argv=None):
    p = argparse.ArgumentParser(prog="compiler-benchmark",
                                description="Profile the Elm compiler and report annotated cost centres")
    sub = p.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="clone, build and profile, then report the Gold results")
    run.add_argument("--root", type=pathlib.Path, default=None,
                     help="benchmark working directory (default: ./compiler-benchmark)")

    report = sub.add_parser("report", help="report cost centres from a saved .prof file")
    report.add_argument("path", type=pathlib.Path)
    report.add_argument("--names", nargs="+", default=list(COST_CENTRE_NAMES))

    compare = sub.add_parser("compare", help="compare cost centres between Gold and Test profiles")
    compare.add_argument("gold", type=pathlib.Path)
    compare.add_argument("test", type=pathlib.Path)
    compare.add_argument("--names", nargs="+", default=list(COST_CENTRE_NAMES))

    args = p.parse_args(argv)
    if args.command == "run":
        run_benchmark(args.root)
    elif args.command == "report":
        report_results(args.path, args.names)
    else:
        compare_results(args.gold, args.test, args.names)
    return 0

if __name__ == "__main__":
    sys.exit(_cli())
