"""Pipeline orchestration for enriching markdown lists."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .config import EnhansomeConfig, GitHubConfig, resolve_token, validate_sort
from .extractor import collect_references
from .fetcher import MetadataFetcher, RepoInfoSource
from .github.client import GitHubClient
from .logging import get_logger
from .markdown.parser import parse_markdown
from .markdown.render import serialize
from .models import JsonOutput, RepoInfo, RepoRef, SortOptions
from .postproc.badges import add_badges
from .postproc.links import rewrite_relative_links
from .postproc.replacements import apply_replacements, parse_replacement_rules
from .postproc.sections import SectionBuilder
from .postproc.sorter import sort_lists

Clock = Callable[[], datetime]


@dataclass
class EnhanceOptions:
    """Inputs of a single enrichment run."""

    content: str
    token: Optional[str] = None
    find_and_replace: str = ""
    regex_find_and_replace: str = ""
    disable_branding: bool = False
    sort: SortOptions = field(default_factory=SortOptions)
    relative_link_prefix: str = ""
    source_repository: Optional[str] = None
    source_file: Optional[str] = None
    github: GitHubConfig = field(default_factory=GitHubConfig)


@dataclass
class EnhanceResult:
    """Rewritten markdown plus the structured export built from it."""

    final_content: str
    is_changed: bool
    json_data: JsonOutput


@dataclass
class FileOutcome:
    """Result of processing one markdown file."""

    path: Path
    changed: bool
    dry_run: bool
    json_path: Optional[Path] = None


async def enhance(
    options: EnhanceOptions,
    *,
    client: Optional[RepoInfoSource] = None,
    clock: Optional[Clock] = None,
) -> EnhanceResult:
    """Enrich ``options.content`` with badges, sorting and a JSON export.

    Metadata is fetched once for the whole document before the tree is
    touched. The JSON hierarchy is captured before sorting so its item order
    always follows the source.
    """
    logger = get_logger("orchestrator")
    original = options.content
    validate_sort(options.sort.by, options.sort.min_links)

    rules = parse_replacement_rules(
        options.find_and_replace,
        options.regex_find_and_replace,
        branding=not options.disable_branding,
    )
    replaced = apply_replacements(original, rules)

    tree = parse_markdown(replaced)
    refs = collect_references(tree)
    logger.debug("Found %d unique GitHub link(s)", len(refs))

    infos: Dict[str, RepoInfo] = {}
    if refs:
        if client is not None:
            infos = await _fetch(client, refs, options)
        else:
            async with _build_client(options) as github:
                infos = await _fetch(github, refs, options)

    json_data = SectionBuilder(options.sort.min_links).build(
        tree,
        infos,
        source_repository=options.source_repository,
        source_file=options.source_file,
        generated_at=(clock or _utcnow)(),
    )

    mutations = sort_lists(tree, infos, options.sort)
    mutations += add_badges(tree, infos)
    mutations += rewrite_relative_links(tree, options.relative_link_prefix)

    final_content = serialize(tree, original) if mutations else replaced
    return EnhanceResult(
        final_content=final_content,
        is_changed=final_content.strip() != original.strip(),
        json_data=json_data,
    )


async def _fetch(
    source: RepoInfoSource, refs: Mapping[str, RepoRef], options: EnhanceOptions
) -> Dict[str, RepoInfo]:
    fetcher = MetadataFetcher(source, concurrency=options.github.concurrency)
    return await fetcher.fetch_all(refs)


def _build_client(options: EnhanceOptions) -> GitHubClient:
    github = options.github
    return GitHubClient(
        options.token,
        api_url=github.api_url,
        max_retries=github.max_retries,
        max_wait_seconds=github.max_wait_seconds,
        request_timeout=github.request_timeout,
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Orchestrator:
    """Applies configuration to enrichment runs over content or files."""

    def __init__(
        self,
        config: EnhansomeConfig | None = None,
        *,
        token: str | None = None,
        client: RepoInfoSource | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or EnhansomeConfig(root=Path.cwd())
        self.token = resolve_token(token)
        self.client = client
        self.clock = clock
        self.logger = get_logger("orchestrator")

    def build_options(
        self,
        content: str,
        *,
        token: Optional[str] = None,
        find_and_replace: Optional[str] = None,
        regex_find_and_replace: Optional[str] = None,
        disable_branding: Optional[bool] = None,
        sort_by: Optional[str] = None,
        min_links: Optional[int] = None,
        relative_link_prefix: Optional[str] = None,
        source_repository: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> EnhanceOptions:
        """Merge per-call overrides over the loaded configuration."""
        config = self.config
        replacements = config.replacements
        sort = config.sort.to_options()
        if sort_by is not None:
            sort.by = sort_by  # type: ignore[assignment]
        if min_links is not None:
            sort.min_links = min_links
        validate_sort(sort.by, sort.min_links)
        return EnhanceOptions(
            content=content,
            token=token or self.token,
            find_and_replace=(
                replacements.find_and_replace if find_and_replace is None else find_and_replace
            ),
            regex_find_and_replace=(
                replacements.regex_find_and_replace
                if regex_find_and_replace is None
                else regex_find_and_replace
            ),
            disable_branding=(
                replacements.disable_branding if disable_branding is None else disable_branding
            ),
            sort=sort,
            relative_link_prefix=(
                config.relative_link_prefix
                if relative_link_prefix is None
                else relative_link_prefix
            ),
            source_repository=source_repository or config.source_repository,
            source_file=source_file,
            github=config.github,
        )

    async def enhance_content(self, content: str, **overrides: object) -> EnhanceResult:
        options = self.build_options(content, **overrides)  # type: ignore[arg-type]
        return await enhance(options, client=self.client, clock=self.clock)

    def process_file(
        self,
        path: str | Path,
        *,
        dry_run: bool = False,
        write_json: Optional[bool] = None,
        **overrides: object,
    ) -> FileOutcome:
        """Enrich one markdown file in place.

        The file is rewritten only when its content changed; read and write
        errors propagate to the caller.
        """
        file_path = Path(path).expanduser()
        self.logger.info("Processing file: %s", file_path)
        original = file_path.read_text(encoding="utf-8")

        overrides.setdefault("source_file", file_path.name)
        result = asyncio.run(self.enhance_content(original, **overrides))

        if result.is_changed and not dry_run:
            file_path.write_text(result.final_content, encoding="utf-8")
            self.logger.info("Successfully updated %s.", file_path)
        elif result.is_changed:
            self.logger.info("Changes detected for %s (dry-run, not written).", file_path)
        else:
            self.logger.info("No changes needed for %s.", file_path)

        json_path: Optional[Path] = None
        wants_json = self.config.write_json if write_json is None else write_json
        if wants_json:
            json_path = file_path.with_suffix(".json")
            if not dry_run:
                payload = json.dumps(result.json_data.to_dict(), indent=2, ensure_ascii=False)
                json_path.write_text(payload + "\n", encoding="utf-8")
                self.logger.info("Wrote JSON export to %s", json_path)

        return FileOutcome(
            path=file_path,
            changed=result.is_changed,
            dry_run=dry_run,
            json_path=json_path,
        )


__all__ = [
    "EnhanceOptions",
    "EnhanceResult",
    "FileOutcome",
    "Orchestrator",
    "enhance",
]
