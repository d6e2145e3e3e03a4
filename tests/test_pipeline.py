"""Tests for strategy selection, dispatch and batch parsing."""
import json
import threading

from statement_ingest.batch_runner import parse_many, run_batch, write_manifest
from statement_ingest.config.settings import MAX_FILE_SIZE_BYTES, MAX_FILE_SIZE_MB
from statement_ingest.exceptions import RecognitionError
from statement_ingest.models import FailureKind, ParseContext, ParseResult, StatementFile
from statement_ingest.parsers import (
    BaseStatementParser,
    InterCSVParser,
    NubankCSVParser,
    OcrStatementParser,
    OFXParser,
    PDFParser,
)
from statement_ingest.pipeline import default_parsers, dispatch, select_parser


class ExplodingParser(BaseStatementParser):
    """Accepts everything, then fails in the named method."""

    name = "Exploding Parser"

    def __init__(self, categorizer, fail_in='parse'):
        super().__init__(categorizer)
        self.fail_in = fail_in

    def can_parse(self, file):
        if self.fail_in == 'can_parse':
            raise RuntimeError("probe exploded")
        return True

    def parse(self, file, context=None):
        raise RuntimeError("boom")


class TestDefaultParsers:
    """Test the standard priority order."""

    def test_without_recognition(self, categorizer):
        parsers = default_parsers(categorizer=categorizer)

        assert [type(p) for p in parsers] == [NubankCSVParser, InterCSVParser, OFXParser, PDFParser]

    def test_with_recognition(self, categorizer, fake_recognition):
        parsers = default_parsers(fake_recognition(), categorizer)

        assert [type(p) for p in parsers] == [
            NubankCSVParser, InterCSVParser, OFXParser, OcrStatementParser, PDFParser
        ]

    def test_categorizer_is_shared(self, categorizer):
        assert all(p.categorizer is categorizer for p in default_parsers(categorizer=categorizer))


class TestDispatch:
    """Test dispatch outcomes."""

    def test_ofx_end_to_end(self, categorizer, end_to_end_ofx):
        result = dispatch(end_to_end_ofx, default_parsers(categorizer=categorizer))

        assert result.success is True
        assert result.parser_name == "Generic OFX Parser"
        assert [t.description for t in result.transactions] == ["SUPERMARKET X", "UBER"]

    def test_unsupported_format(self, categorizer):
        file = StatementFile(content=b"hello", name="notes.txt", media_type="text/plain")
        result = dispatch(file, default_parsers(categorizer=categorizer))

        assert result.success is False
        assert result.failure_kind is FailureKind.UNSUPPORTED_FORMAT
        assert result.parser_name is None
        assert "notes.txt" in result.errors[0]

    def test_parser_exception_becomes_internal_error(self, categorizer, end_to_end_ofx):
        result = dispatch(end_to_end_ofx, [ExplodingParser(categorizer)])

        assert result.success is False
        assert result.failure_kind is FailureKind.INTERNAL_ERROR
        assert result.parser_name == "Exploding Parser"
        assert "boom" in result.errors[0]

    def test_raising_predicate_is_skipped(self, categorizer, end_to_end_ofx):
        parsers = [ExplodingParser(categorizer, fail_in='can_parse'), OFXParser(categorizer)]

        assert isinstance(select_parser(end_to_end_ofx, parsers), OFXParser)
        assert dispatch(end_to_end_ofx, parsers).success is True

    def test_first_acceptor_wins_without_fallback(self, categorizer, end_to_end_ofx):
        result = dispatch(end_to_end_ofx, [ExplodingParser(categorizer), OFXParser(categorizer)])

        assert result.failure_kind is FailureKind.INTERNAL_ERROR

    def test_cancelled_before_parse(self, categorizer, end_to_end_ofx):
        event = threading.Event()
        event.set()
        result = dispatch(end_to_end_ofx, default_parsers(categorizer=categorizer), ParseContext(cancel_event=event))

        assert result.failure_kind is FailureKind.CANCELLED
        assert result.transactions == []

    def test_ocr_before_heuristic_pdf(self, categorizer, statement_pdf, ocr_payload, fake_recognition):
        client = fake_recognition(payload=ocr_payload)
        result = dispatch(statement_pdf, default_parsers(client, categorizer))

        assert client.calls == 1
        assert result.parser_name == "OCR Parser (AI-Powered)"
        assert result.success is True

    def test_ocr_failure_does_not_fall_back(self, categorizer, statement_pdf, fake_recognition):
        client = fake_recognition(error=RecognitionError("service down", unavailable=True))
        result = dispatch(statement_pdf, default_parsers(client, categorizer))

        assert result.failure_kind is FailureKind.CAPABILITY_UNAVAILABLE
        assert result.parser_name == "OCR Parser (AI-Powered)"


class TestBatch:
    """Test concurrent parsing of several files."""

    def test_parse_many_keeps_order(self, categorizer, end_to_end_ofx):
        junk = StatementFile(content=b"junk", name="junk.bin")
        results = parse_many([junk, end_to_end_ofx, junk], default_parsers(categorizer=categorizer), max_workers=3)

        assert [r.success for r in results] == [False, True, False]
        assert all(isinstance(r, ParseResult) for r in results)

    def test_parse_many_empty(self, categorizer):
        assert parse_many([], default_parsers(categorizer=categorizer)) == []

    def test_run_batch_writes_json_and_manifest(self, tmp_path, categorizer, end_to_end_ofx):
        statement = tmp_path / "fatura.ofx"
        statement.write_bytes(end_to_end_ofx.content)
        missing = tmp_path / "missing.ofx"
        out_dir = tmp_path / "out"

        summary = run_batch(
            [statement, missing],
            default_parsers(categorizer=categorizer),
            json_output_dir=out_dir,
            root_directory=tmp_path,
        )

        assert summary.totals == {'processed': 2, 'successes': 1, 'failures': 1}
        assert summary.results[0].transactions == 2
        assert summary.results[1].failure_kind == "internal_error"

        payload = json.loads((out_dir / "fatura.json").read_text(encoding='utf-8'))
        assert payload['transaction_count'] == 2

        manifest_path = tmp_path / "manifest.json"
        write_manifest(summary, manifest_path)
        manifest = json.loads(manifest_path.read_text(encoding='utf-8'))
        assert manifest['root_directory'] == str(tmp_path)
        assert len(manifest['results']) == 2


class TestFileSizeChecks:
    """Test uploads rejected before any strategy is probed."""

    def test_empty_file(self, categorizer):
        result = dispatch(StatementFile(content=b"", name="fatura.ofx"), default_parsers(categorizer=categorizer))

        assert result.failure_kind is FailureKind.PARSE_FAILED
        assert result.errors == ["Empty file"]

    def test_oversized_file(self, categorizer):
        content = b"OFXHEADER:100\n" + b"x" * (MAX_FILE_SIZE_BYTES + 1)
        result = dispatch(StatementFile(content=content, name="fatura.ofx"), default_parsers(categorizer=categorizer))

        assert result.failure_kind is FailureKind.PARSE_FAILED
        assert result.errors == [f"File too large (max {MAX_FILE_SIZE_MB}MB)"]
        assert result.parser_name is None


class GatedParser(BaseStatementParser):
    """Parser whose "slow.ofx" call waits until another file has been reported."""

    name = "Gated Parser"

    def __init__(self, categorizer, gate):
        super().__init__(categorizer)
        self.gate = gate
        self.released = None

    def can_parse(self, file):
        return True

    def parse(self, file, context=None):
        if file.name == "slow.ofx":
            self.released = self.gate.wait(timeout=5)
        return ParseResult.failure(["not a statement"])


class TestProgressReporting:
    """Test that progress is reported while the batch is still running."""

    def test_callback_fires_before_slow_file_finishes(self, tmp_path, categorizer):
        for name in ("slow.ofx", "fast.ofx"):
            (tmp_path / name).write_bytes(b"content")
        gate = threading.Event()
        parser = GatedParser(categorizer, gate)
        seen = []

        def on_progress(done, total, name):
            seen.append((done, total, name))
            gate.set()

        summary = run_batch(
            [tmp_path / "slow.ofx", tmp_path / "fast.ofx"],
            [parser],
            max_workers=2,
            progress_callback=on_progress,
        )

        assert parser.released is True
        assert seen == [(1, 2, "fast.ofx"), (2, 2, "slow.ofx")]
        assert [row.file for row in summary.results] == ["slow.ofx", "fast.ofx"]

    def test_parse_many_reports_input_index(self, categorizer):
        gate = threading.Event()
        files = [StatementFile(content=b"a", name="slow.ofx"), StatementFile(content=b"b", name="fast.ofx")]
        indexes = []

        def on_result(index, result):
            indexes.append(index)
            gate.set()

        results = parse_many(files, [GatedParser(categorizer, gate)], max_workers=2, on_result=on_result)

        assert indexes == [1, 0]
        assert len(results) == 2
