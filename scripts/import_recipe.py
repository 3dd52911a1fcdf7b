import argparse
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from pantrie.app.config import settings
from pantrie.app.deps import build_recipe_importer
from pantrie.services.errors import ServiceError
from pantrie.services.importer import RecipeImporter


def run_import(importer: RecipeImporter, url: str, show_json: bool) -> None:
    print("\n===", url)
    try:
        record = importer.import_recipe(url)
    except ServiceError as error:
        print("error:", error)
        return

    if show_json:
        print(record.model_dump_json(indent=2))
        return

    print("title:", record.title)
    print("source:", record.source)
    print("ingredients:", len(record.ingredients))
    print("instructions:", len(record.instructions))
    print("times (prep/cook/total):", record.prepTime, record.cookTime, record.totalTime)
    print("servings:", record.servings)
    print("image:", record.imageUrl)
    print("first_step_preview:", record.instructions[0][:120])


def main() -> None:
    parser = argparse.ArgumentParser(description="Quick recipe import smoke test")
    parser.add_argument("url", nargs="+")
    parser.add_argument("--json", action="store_true", help="Print the full recipe record as JSON")
    parser.add_argument("--fetch-timeout", type=float, default=settings.FETCH_TIMEOUT_SECONDS)
    args = parser.parse_args()

    config = settings.model_copy(update={"FETCH_TIMEOUT_SECONDS": args.fetch_timeout})
    importer = build_recipe_importer(config)

    for url in args.url:
        run_import(importer, url, args.json)


if __name__ == "__main__":
    main()
