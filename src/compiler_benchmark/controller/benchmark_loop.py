from pathlib import Path
import shutil
from typing import List, Optional

from tqdm import tqdm

from ..report.driver import Extraction, report_results
from ..sandbox.commands import CommandError, cabal, elm_make, git, succeeded
from ..schemas import CompilerVersion, Repo
from ..utils.config import get_settings
from ..utils.logger import get_logger

log = get_logger("BenchmarkLoop")

PROJECTS_DIR = "benchmark-projects"
SRC_DIR = "benchmark-src"
RESULTS_DIR = "benchmark-results"
PROFILE_NAME = "elm-make.prof"

# Components of the Elm Platform that make up the golden toolchain, in the
# order they are fetched.
GOLDEN_REPOS = ["elm-compiler", "elm-package", "elm-make"]


def golden_repos() -> List[Repo]:
    base = get_settings().upstream_base_url.rstrip("/")
    return [Repo(project_name=name, url=f"{base}/{name}.git") for name in GOLDEN_REPOS]


def result_file(root: Path, project: str, version: CompilerVersion) -> Path:
    return Path(root) / RESULTS_DIR / f"{project}.{version.value}.prof"


def elm_make_binary(root: Path) -> Path:
    return Path(root) / SRC_DIR / "elm-make" / ".cabal-sandbox" / "bin" / "elm-make"


def list_projects(projects_dir: Path) -> List[str]:
    return sorted(p.name for p in Path(projects_dir).iterdir() if p.is_dir())


def prepare_benchmark_projects(root: Path) -> Path:
    """Clone the Elm projects that get compiled, skipping those already present."""
    projects_dir = Path(root) / PROJECTS_DIR
    projects_dir.mkdir(parents=True, exist_ok=True)
    for name, url in get_settings().benchmark_projects.items():
        if (projects_dir / name).is_dir():
            log.info(f"Benchmark project {name} already present")
            continue
        git(["clone", url, name], cwd=projects_dir, check=True)
    return projects_dir


def make_src_repo(root: Path, repo: Repo) -> Path:
    """Fetch and prepare a repository containing some component of the Elm Platform."""
    root = Path(root)
    repo_dir = root / SRC_DIR / repo.project_name
    if repo_dir.is_dir():
        log.info(f"Source repo {repo.project_name} already present")
        return repo_dir

    git(["clone", "--branch", repo.branch, repo.url, str(repo_dir)], cwd=root, check=True)
    # cabal.config pins the dependency versions every component is built against.
    shutil.copyfile(root / "cabal.config.example", repo_dir / "cabal.config")
    return repo_dir


def build_elm_make(root: Path) -> Path:
    """Install elm-make into its own cabal sandbox, against the local compiler and package sources."""
    root = Path(root)
    elm_make_dir = root / SRC_DIR / "elm-make"
    cabal(["sandbox", "init"], cwd=elm_make_dir)
    cabal(["sandbox", "add-source", str(root / SRC_DIR / "elm-compiler")], cwd=elm_make_dir)
    cabal(["sandbox", "add-source", str(root / SRC_DIR / "elm-package")], cwd=elm_make_dir)
    cabal(["install"], cwd=elm_make_dir, check=True)
    return elm_make_binary(root)


def compile_project(root: Path, project: str, version: CompilerVersion) -> Path:
    """Compile an Elm project under profiling and keep its report in the results directory."""
    root = Path(root)
    project_dir = root / PROJECTS_DIR / project

    # Remove the build artifacts so that the full project is built each time;
    # otherwise consecutive runs are not comparable.
    artifacts = project_dir / "elm-stuff" / "build-artifacts"
    if artifacts.is_dir():
        shutil.rmtree(artifacts)

    returncode = elm_make(elm_make_binary(root), project_dir)
    if not succeeded(returncode):
        log.warning(f"elm-make exited with {returncode} for {project} ({version.value})")

    profile = project_dir / PROFILE_NAME
    if not profile.is_file():
        raise CommandError("profile", f"elm-make did not write {profile}")
    destination = result_file(root, project, version)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(profile, destination)
    log.info(f"Saved {version.value} profile for {project} to {destination}")
    return destination


def use_dev_compiler(root: Path) -> None:
    """Point elm-compiler at the repository the benchmark is run from and pull its dev branch."""
    root = Path(root)
    settings = get_settings()
    compiler_dir = root / SRC_DIR / "elm-compiler"
    if not succeeded(git(["remote", "show", settings.dev_remote], cwd=compiler_dir)):
        git(["remote", "add", settings.dev_remote, str(root.parent)], cwd=compiler_dir, check=True)
    git(["pull", settings.dev_remote, settings.dev_branch], cwd=compiler_dir, check=True)


def compile_all(root: Path, projects: List[str], version: CompilerVersion) -> List[Path]:
    return [compile_project(root, project, version)
            for project in tqdm(projects, desc=f"Compiling ({version.value})")]


def run_benchmark(root: Optional[Path] = None) -> Optional[Extraction]:
    settings = get_settings()
    root = Path(root) if root is not None else Path.cwd() / settings.work_root
    log.info(f"=== Starting benchmark in {root} ===")

    projects_dir = prepare_benchmark_projects(root)
    (root / SRC_DIR).mkdir(parents=True, exist_ok=True)
    for repo in golden_repos():
        make_src_repo(root, repo)
    build_elm_make(root)
    (root / RESULTS_DIR).mkdir(parents=True, exist_ok=True)

    projects = list_projects(projects_dir)
    log.info(f"Benchmark projects: {projects}")
    compile_all(root, projects, CompilerVersion.GOLD)

    use_dev_compiler(root)
    build_elm_make(root)
    compile_all(root, projects, CompilerVersion.TEST)

    log.info("=== Benchmark runs complete, reporting ===")
    return report_results(result_file(root, settings.report_project, CompilerVersion.GOLD))
