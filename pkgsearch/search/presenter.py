"""
Rendering of search results.

Result lines (or the JSON document) go to stdout so scripts can consume
them; the hint line and every diagnostic go to stderr. Rendering produces a
:class:`RenderedOutput` and writing it is a separate step that takes the two
sinks explicitly.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, TextIO

from pkgsearch.core.exceptions import PkgSearchError, UsageError
from pkgsearch.core.interfaces import (
    OutputFormat, PackageRecord, RankedResult, RenderedOutput, SearchQuery, SearchSettings
)


logger = logging.getLogger(__name__)

HINT_LINE = "Use `pkgsearch show {package}` to see available versions"
NO_MATCH_MESSAGE = "No packages matched this search term: {term}"
DEFAULT_DESCRIPTION = "<no description provided>"
COLUMN_GAP = "  "

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


@dataclass
class DisplayItem:
    """
    One rendered line of text output.
    """
    input: str
    package: str
    description: Optional[str]
    render_with_input: bool = False

    def label(self, separator: str) -> str:
        if self.render_with_input:
            return f"{self.input}{separator}{self.package}"
        return self.package


class SearchPresenter:
    """
    Renders ranked results as text lines or JSON.
    """

    def __init__(self, settings: Optional[SearchSettings] = None, interactive: bool = False):
        """
        Initialize the presenter.

        Args:
            settings: Effective settings; controls the legacy input separator.
            interactive: Whether stdout is a terminal. The no-match message goes
                to stdout for non-interactive callers and to stderr otherwise.
        """
        self.settings = settings or SearchSettings()
        self.interactive = interactive

    def render(self, results: Sequence[RankedResult], query: SearchQuery) -> RenderedOutput:
        """
        Render the results of a successful search.

        Args:
            results: Ranked results.
            query: The query that produced them.

        Returns:
            Text for both channels; the exit code is always success.
        """
        if query.output_format == OutputFormat.JSON:
            return self.render_json(results)

        if not results:
            message = NO_MATCH_MESSAGE.format(term=query.term) + "\n"
            if self.interactive:
                return RenderedOutput(stderr=message)
            return RenderedOutput(stdout=message)

        items = self.build_display_items([r.record for r in results])
        return RenderedOutput(stdout=self.format_lines(items), stderr=HINT_LINE + "\n")

    def render_json(self, results: Sequence[RankedResult]) -> RenderedOutput:
        payload = []
        for result in results:
            item = result.record.to_dict()
            item["exact"] = result.is_exact_version_match
            payload.append(item)

        stderr = HINT_LINE + "\n" if results else ""
        return RenderedOutput(stdout=json.dumps(payload) + "\n", stderr=stderr)

    def build_display_items(self, records: Sequence[PackageRecord]) -> List[DisplayItem]:
        """
        Reduce records to one display line per package.

        Versions never appear in text output, so records differing only by
        version or system share a line. With ``disambiguate_inputs`` enabled a
        package defined by more than one input gets one line per input,
        labelled ``input<separator>package``; otherwise the first input wins.

        Args:
            records: Records in ranked order.

        Returns:
            Display items in ranked order.
        """
        disambiguate = self.settings.disambiguate_inputs
        package_inputs: Dict[str, Set[str]] = {}
        for record in records:
            package_inputs.setdefault(record.display_name, set()).add(record.input)

        items = []
        seen = set()
        for record in records:
            key = (record.display_name, record.input) if disambiguate else record.display_name
            if key in seen:
                continue
            seen.add(key)
            items.append(DisplayItem(
                input=record.input,
                package=record.display_name,
                description=record.description,
                render_with_input=disambiguate and len(package_inputs[record.display_name]) > 1,
            ))
        return items

    def format_lines(self, items: Sequence[DisplayItem]) -> str:
        separator = self.settings.input_separator
        width = max(len(item.label(separator)) for item in items)

        lines = []
        for item in items:
            description = (item.description or DEFAULT_DESCRIPTION).replace("\n", " ")
            lines.append(f"{item.label(separator):<{width}}{COLUMN_GAP}{description}".rstrip())
        return "\n".join(lines) + "\n"

    def render_show(self, records: Sequence[PackageRecord], show_all: bool = False) -> RenderedOutput:
        """
        Render the detail view of one package.

        Args:
            records: Versions of the package, best first.
            show_all: List every version instead of only the best one.

        Returns:
            Two lines: the package with its description, then its version(s).
        """
        first = records[0]
        name = first.display_name
        description = (first.description or DEFAULT_DESCRIPTION).replace("\n", " ")

        if show_all:
            versions = []
            for record in records:
                if record.version is None:
                    continue
                label = f"{record.display_name}@{record.version}"
                if label not in versions:
                    versions.append(label)
            listing = ", ".join(versions) or name
        elif first.version is not None:
            listing = f"{name}@{first.version}"
        else:
            listing = name

        return RenderedOutput(stdout=f"{name} - {description}\n    {name} - {listing}\n")

    def render_error(self, error: PkgSearchError) -> RenderedOutput:
        """
        Render an error as a single stderr message.

        Usage errors exit with status 2, all other errors with 1.
        """
        exit_code = EXIT_USAGE if isinstance(error, UsageError) else EXIT_FAILURE
        return RenderedOutput(stderr=f"Error: {error}\n", exit_code=exit_code)

    def write(self, rendered: RenderedOutput, out: TextIO, err: TextIO) -> int:
        """
        Write rendered output to the given sinks.

        Args:
            rendered: Output produced by one of the render methods.
            out: Sink for result data.
            err: Sink for hints and diagnostics.

        Returns:
            The exit code carried by the rendered output.
        """
        if rendered.stdout:
            out.write(rendered.stdout)
            out.flush()
        if rendered.stderr:
            err.write(rendered.stderr)
            err.flush()
        return rendered.exit_code
