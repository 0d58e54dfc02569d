"""Tests for the scaffold generation orchestrator.

Covers:
- build_archive contents with an in-memory fetcher
- generate delivers exactly once, under the configured archive name
- Validation, composition and retrieval failures surface as GenerationError
  with no delivery
- fetch_all deduplication and cancellation on first failure
- Concurrent generate calls stay isolated
"""

from __future__ import annotations

import asyncio
import io
import zipfile

import pytest

from minilisp_scaffold.config import Config, FetchConfig
from minilisp_scaffold.scaffolder.fetcher import RetrievalError
from minilisp_scaffold.scaffolder.generator import GenerationError, ScaffoldGenerator, generate
from minilisp_scaffold.scaffolder.readme import UnsupportedCombinationError
from minilisp_scaffold.wizard.state import SelectionError


pytestmark = pytest.mark.unit


SCENARIO_B = ["windows", "vscode", "mingw", "cmake"]


def _names(blob: bytes) -> set[str]:
    with zipfile.ZipFile(io.BytesIO(blob)) as zf:
        return set(zf.namelist())


@pytest.fixture
def generator(tmp_config, fake_fetcher, recording_delivery) -> ScaffoldGenerator:
    return ScaffoldGenerator(tmp_config, fetcher=fake_fetcher, delivery=recording_delivery)


class TestBuildArchive:
    @pytest.mark.asyncio
    async def test_archive_layout(self, generator):
        names = _names(await generator.build_archive(SCENARIO_B))
        assert "README.md" in names
        assert "src/main.cpp" in names
        assert ".vscode/launch.json" in names
        assert "CMakeLists.txt" in names
        assert {".clang-format", ".gitignore", ".editorconfig"} <= names

    @pytest.mark.asyncio
    async def test_file_contents_come_from_fetcher(self, generator):
        blob = await generator.build_archive(SCENARIO_B)
        with zipfile.ZipFile(io.BytesIO(blob)) as zf:
            assert zf.read(".vscode/tasks.json").decode() == "<cmake.mingw.vscode/tasks.json>\n"
            readme = zf.read("README.md").decode()
        assert "<readme/compiler.md>" in readme
        assert "<readme/prepare-vscode-cmake.md>" in readme
        assert readme.index("<readme/install-cmake.md>") < readme.index("<readme/run-vscode.md>")

    @pytest.mark.asyncio
    async def test_fetches_every_reference_once(self, generator, fake_fetcher):
        await generator.build_archive(SCENARIO_B)
        assert len(fake_fetcher.calls) == len(set(fake_fetcher.calls))
        assert "readme/run-vscode.md" in fake_fetcher.calls
        assert "src/tokenizer.h" in fake_fetcher.calls


class TestGenerate:
    @pytest.mark.asyncio
    async def test_delivers_archive(self, generator, recording_delivery):
        path = await generator.generate(SCENARIO_B)
        assert path.name == "mini_lisp.zip"
        assert len(recording_delivery.delivered) == 1
        blob, filename = recording_delivery.delivered[0]
        assert filename == "mini_lisp.zip"
        assert "README.md" in _names(blob)

    @pytest.mark.asyncio
    async def test_module_level_generate(self, tmp_config, fake_fetcher, recording_delivery):
        await generate(SCENARIO_B, config=tmp_config, fetcher=fake_fetcher, delivery=recording_delivery)
        assert len(recording_delivery.delivered) == 1

    @pytest.mark.asyncio
    async def test_default_file_delivery(self, tmp_config, fake_fetcher):
        path = await ScaffoldGenerator(tmp_config, fetcher=fake_fetcher).generate(SCENARIO_B)
        assert path == tmp_config.archive_path
        assert path.is_file()


class TestGenerationFailures:
    @pytest.mark.asyncio
    async def test_illegal_selection(self, generator, fake_fetcher, recording_delivery):
        with pytest.raises(GenerationError) as excinfo:
            await generator.generate(["mac", "clion", "apple-clang", "xmake"])
        assert excinfo.value.stage == "validate"
        assert isinstance(excinfo.value.__cause__, SelectionError)
        assert fake_fetcher.calls == []
        assert recording_delivery.delivered == []

    @pytest.mark.asyncio
    async def test_wrong_length(self, generator):
        with pytest.raises(GenerationError, match="Expected 4"):
            await generator.generate(["windows", "vscode"])

    @pytest.mark.asyncio
    async def test_non_sequence_selection(self, generator, fake_fetcher, recording_delivery):
        with pytest.raises(GenerationError) as excinfo:
            await generator.generate(None)
        assert excinfo.value.stage == "validate"
        assert excinfo.value.selections == ()
        assert isinstance(excinfo.value.__cause__, SelectionError)
        assert fake_fetcher.calls == []
        assert recording_delivery.delivered == []

    @pytest.mark.asyncio
    async def test_unexpected_fetcher_error_wrapped(self, tmp_config, recording_delivery):
        class ExplodingFetcher:
            async def fetch(self, reference):
                raise RuntimeError("backend exploded")

        gen = ScaffoldGenerator(tmp_config, fetcher=ExplodingFetcher(), delivery=recording_delivery)
        with pytest.raises(GenerationError, match="backend exploded") as excinfo:
            await gen.generate(SCENARIO_B)
        assert excinfo.value.stage == "retrieve"
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert recording_delivery.delivered == []

    @pytest.mark.asyncio
    async def test_retrieval_failure_aborts(self, tmp_config, fetcher_factory, recording_delivery):
        fetcher = fetcher_factory(fail_on={"src/token.cpp"})
        gen = ScaffoldGenerator(tmp_config, fetcher=fetcher, delivery=recording_delivery)
        with pytest.raises(GenerationError) as excinfo:
            await gen.generate(SCENARIO_B)
        assert excinfo.value.stage == "retrieve"
        assert isinstance(excinfo.value.__cause__, RetrievalError)
        assert "src/token.cpp" in str(excinfo.value)
        assert recording_delivery.delivered == []
        assert not tmp_config.archive_path.exists()

    @pytest.mark.asyncio
    async def test_fragment_failure_aborts(self, tmp_config, fetcher_factory, recording_delivery):
        fetcher = fetcher_factory(fail_on={"readme/compiler.md"})
        gen = ScaffoldGenerator(tmp_config, fetcher=fetcher, delivery=recording_delivery)
        with pytest.raises(GenerationError, match="readme/compiler.md"):
            await gen.generate(SCENARIO_B)
        assert recording_delivery.delivered == []

    @pytest.mark.asyncio
    async def test_unsupported_combination(self, generator, monkeypatch):
        def _raise(ide, tool):
            raise UnsupportedCombinationError(ide, tool)

        monkeypatch.setattr("minilisp_scaffold.scaffolder.generator.compose_readme", _raise)
        with pytest.raises(GenerationError) as excinfo:
            await generator.generate(SCENARIO_B)
        assert excinfo.value.stage == "compose"
        assert "vscode" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_delivery_failure(self, tmp_config, fake_fetcher):
        class BrokenDelivery:
            async def deliver(self, blob, filename):
                raise PermissionError("read-only")

        gen = ScaffoldGenerator(tmp_config, fetcher=fake_fetcher, delivery=BrokenDelivery())
        with pytest.raises(GenerationError) as excinfo:
            await gen.generate(SCENARIO_B)
        assert excinfo.value.stage == "deliver"


class TestFetchAll:
    @pytest.mark.asyncio
    async def test_deduplicates(self, generator, fake_fetcher):
        result = await generator.fetch_all(["a", "b", "a"])
        assert result == {"a": "<a>\n", "b": "<b>\n"}
        assert sorted(fake_fetcher.calls) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_first_failure_cancels_others(self, tmp_config, fetcher_factory):
        fetcher = fetcher_factory(fail_on={"bad"}, delay=10)
        gen = ScaffoldGenerator(tmp_config, fetcher=fetcher)
        with pytest.raises(RetrievalError):
            await asyncio.wait_for(gen.fetch_all(["slow-1", "bad", "slow-2"]), timeout=5)
        assert sorted(fetcher.cancelled) == ["slow-1", "slow-2"]

    @pytest.mark.asyncio
    async def test_respects_concurrency_limit(self, tmp_path):
        in_flight = 0
        peak = 0

        class CountingFetcher:
            async def fetch(self, reference):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return reference

        config = Config(output_dir=tmp_path, fetch=FetchConfig(max_concurrent=2))
        gen = ScaffoldGenerator(config, fetcher=CountingFetcher())
        await gen.fetch_all([f"ref-{i}" for i in range(8)])
        assert peak == 2

    @pytest.mark.asyncio
    async def test_fetcher_context_wraps_whole_run(self, tmp_config):
        events: list[str] = []

        class SessionFetcher:
            async def __aenter__(self):
                events.append("open")
                return self

            async def __aexit__(self, *exc_info):
                events.append("close")

            async def fetch(self, reference):
                events.append(reference)
                return reference

        gen = ScaffoldGenerator(tmp_config, fetcher=SessionFetcher())
        await gen.fetch_all(["a", "b", "c"])
        assert events[0] == "open"
        assert events[-1] == "close"
        assert sorted(events[1:-1]) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_fetcher_context_closed_on_failure(self, tmp_config):
        closed = []

        class FailingSessionFetcher:
            async def __aenter__(self):
                return self

            async def __aexit__(self, *exc_info):
                closed.append(exc_info[0])

            async def fetch(self, reference):
                raise RetrievalError(reference, "gone")

        gen = ScaffoldGenerator(tmp_config, fetcher=FailingSessionFetcher())
        with pytest.raises(RetrievalError):
            await gen.fetch_all(["a"])
        assert closed == [RetrievalError]


class TestIsolation:
    @pytest.mark.asyncio
    async def test_concurrent_generations(self, tmp_config, fake_fetcher, recording_delivery):
        gen = ScaffoldGenerator(tmp_config, fetcher=fake_fetcher, delivery=recording_delivery)
        blob_b, blob_a = await asyncio.gather(
            gen.build_archive(SCENARIO_B),
            gen.build_archive(["mac", "clion", "apple-clang", "cmake"]),
        )
        assert ".vscode/tasks.json" in _names(blob_b)
        assert ".idea/misc.xml" not in _names(blob_b)
        assert ".idea/misc.xml" in _names(blob_a)
        assert ".vscode/tasks.json" not in _names(blob_a)
