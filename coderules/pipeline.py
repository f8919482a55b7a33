"""Request pipeline: discovery, relevance filtering, scheduling and assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .config import CodeRulesConfig, LLMConfig, PipelineConfig, load_config
from .doc_scanner import DocScanner, DocumentReadError
from .filters import ContentRelevanceFilter, FileFilterResult, FileRelevanceFilter
from .formatter import ToolResponse, format_error, format_output, format_success
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import DocumentMetadata, RelevantContent
from .oracle import LLMRelevanceOracle, RelevanceOracle, TextRunner
from .scheduler import BoundedScheduler
from .stores.filter_cache import FilterCache
from .tool import parse_input


@dataclass
class PipelineRun:
    """Everything produced while answering one request."""

    task: str
    docs_path: str
    discovered: List[DocumentMetadata]
    file_filter: FileFilterResult
    contents: List[RelevantContent]
    output: str
    content_statuses: Dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0


class CodeRulesPipeline:
    """Turns a task and a documentation root into one assembled markdown document."""

    def __init__(
        self,
        oracle: RelevanceOracle,
        *,
        scanner: DocScanner | None = None,
        cache: FilterCache | None = None,
        settings: PipelineConfig | None = None,
    ) -> None:
        self.settings = settings or PipelineConfig()
        self.oracle = oracle
        self.scanner = scanner or DocScanner(
            extensions=self.settings.extensions,
            exclude_dirs=self.settings.exclude_dirs,
        )
        self.cache = cache if cache is not None else FilterCache()
        self.file_filter = FileRelevanceFilter(
            oracle, small_batch_threshold=self.settings.small_batch_threshold
        )
        self.content_filter = ContentRelevanceFilter(
            oracle,
            self.cache,
            short_content_threshold=self.settings.short_content_threshold,
        )
        self.scheduler = BoundedScheduler(self.settings.max_concurrency)
        self.logger = get_logger("pipeline")

    @classmethod
    def from_config(
        cls, config: CodeRulesConfig, runner: TextRunner | None = None
    ) -> "CodeRulesPipeline":
        oracle = LLMRelevanceOracle(runner or build_runner(config.llm))
        return cls(oracle, settings=config.pipeline)

    async def process_request(self, arguments: Optional[Mapping[str, Any]]) -> ToolResponse:
        """Answer one tool call; every failure becomes a structured error response."""
        try:
            request = parse_input(arguments)
            run = await self.run(request.task, request.docs_path)
        except Exception as exc:
            self.logger.error("Request failed: %s", exc)
            return format_error(exc)
        return format_success(run.output)

    async def run(self, task: str, docs_path: str) -> PipelineRun:
        self.logger.info('Processing task: "%s" with docs path: %s', task, docs_path)

        paths = self.scanner.discover(docs_path)
        discovered = [self.scanner.extract_metadata(path) for path in paths]

        file_result = await self.file_filter.filter(discovered, task)
        self.logger.info(
            "Selected %d relevant files (%s)", len(file_result.files), file_result.status
        )

        statuses: Dict[str, str] = {}

        async def _process_file(file: DocumentMetadata) -> RelevantContent:
            try:
                body = self.scanner.read_body(file.path)
            except DocumentReadError:
                statuses[file.path] = "read_error"
                return RelevantContent(file=file.filename, content=f"Error: Could not read {file.path}")
            result = await self.content_filter.filter(body, task)
            statuses[file.path] = result.status
            return RelevantContent(file=file.filename, content=result.content)

        report = await self.scheduler.run(file_result.files, _process_file)
        contents: List[RelevantContent] = []
        for file, outcome in zip(file_result.files, report.outcomes):
            if outcome.ok and outcome.value is not None:
                contents.append(outcome.value)
            else:
                statuses[file.path] = "error"
                contents.append(RelevantContent(file=file.filename, content=f"Error: {outcome.error}"))
        self.logger.info(
            "Filtered content of %d files in %.2fs", len(contents), report.elapsed
        )

        return PipelineRun(
            task=task,
            docs_path=docs_path,
            discovered=discovered,
            file_filter=file_result,
            contents=contents,
            output=format_output(contents),
            content_statuses=statuses,
            elapsed=report.elapsed,
        )


def build_runner(llm_cfg: LLMConfig | None) -> LLMRunner:
    """Create the default text runner from the optional ``llm`` config block."""
    llm_cfg = llm_cfg or LLMConfig()
    kwargs: Dict[str, object] = {}
    if llm_cfg.runner:
        kwargs["executable"] = llm_cfg.runner
        # A CLI runner talks to a local binary rather than an HTTP endpoint.
        if llm_cfg.base_url is None:
            kwargs["base_url"] = None
    if llm_cfg.model:
        kwargs["model"] = llm_cfg.model
    if llm_cfg.base_url is not None:
        kwargs["base_url"] = llm_cfg.base_url
    if llm_cfg.temperature is not None:
        kwargs["temperature"] = llm_cfg.temperature
    if llm_cfg.max_tokens is not None:
        kwargs["max_tokens"] = llm_cfg.max_tokens
    if llm_cfg.api_key is not None:
        kwargs["api_key"] = llm_cfg.api_key
    if llm_cfg.request_timeout is not None:
        kwargs["request_timeout"] = llm_cfg.request_timeout
    if llm_cfg.max_retries is not None:
        kwargs["max_retries"] = llm_cfg.max_retries
    return LLMRunner(**kwargs)  # type: ignore[arg-type]


def load_pipeline(config_path: Path | None = None) -> CodeRulesPipeline:
    """Build a pipeline from ``.coderules.yml`` (defaults when absent)."""
    config = load_config(config_path or Path.cwd())
    return CodeRulesPipeline.from_config(config)


__all__ = ["CodeRulesPipeline", "PipelineRun", "build_runner", "load_pipeline"]
