from pathlib import Path
import tempfile
import unittest

from abnovobench_ingest.core.coverage import (
    antibody_chain_from_filename,
    derive_region_spans,
    parse_coverage_table,
)
from abnovobench_ingest.core.errors import MalformedTableError, NotFoundError
from abnovobench_ingest.core.model import CoverageDataset, RegionSpan
from abnovobench_ingest.loaders import depth_loader

TABLE = "\n".join([
    'Position,1,2,3,4,5',
    'Sequence,Q,V,Q,L,V',
    '"Region","FR1","CDR1","CDR1","FR2","CDR2"',
    'Casanovo,3,4,,5,x',
    'PepNet, 1 ,2,3,4,5',
])


def _spans(labels, **kw):
    return [(s.region_name, s.start_position, s.end_position) for s in derive_region_spans(labels, **kw)]


class RegionSpanTests(unittest.TestCase):
    def test_two_cdr_runs(self):
        self.assertEqual([("CDR1", 2, 3), ("CDR2", 5, 5)], _spans(["FR1", "CDR1", "CDR1", "FR2", "CDR2"]))

    def test_framework_only_yields_nothing(self):
        self.assertEqual([], _spans(["FR1", "FR1", "FR2"]))
        self.assertEqual([], _spans([]))

    def test_leading_and_adjacent_cdrs(self):
        self.assertEqual([("CDR1", 1, 2), ("CDR2", 3, 3), ("CDR3", 4, 6)],
                         _spans(["CDR1", "CDR1", "CDR2", "CDR3", "CDR3", "CDR3"]))

    def test_spans_ordered_and_disjoint(self):
        labels = ["FR1", "CDR1", "FR2", "CDR2", "CDR2", "FR3", "CDR3", "FR4", "CDR1"]
        spans = derive_region_spans(labels)
        starts = [s.start_position for s in spans]
        self.assertEqual(sorted(starts), starts)
        for a, b in zip(spans, spans[1:]):
            self.assertLess(a.end_position, b.start_position)
        for s in spans:
            self.assertTrue(all(labels[i - 1] == s.region_name
                                for i in range(s.start_position, s.end_position + 1)))
            self.assertEqual("CDR", s.kind)

    def test_deterministic(self):
        labels = ["FR1", "CDR1", "CDR1", "FR2"]
        self.assertEqual(derive_region_spans(labels), derive_region_spans(labels))

    def test_custom_vocabulary(self):
        self.assertEqual([("H1", 2, 2)], _spans(["FR1", "H1", "FR2"], cdr_labels=("H1",)))

    def test_empty_vocabulary_rejected(self):
        with self.assertRaises(ValueError):
            derive_region_spans(["CDR1"], cdr_labels=())


class CoverageTableTests(unittest.TestCase):
    def test_parse_table(self):
        ds = parse_coverage_table(TABLE, "mAb1_HC.csv")
        self.assertEqual("mAb1", ds.antibody_id)
        self.assertEqual("Heavy Chain", ds.chain_label)
        self.assertEqual((1, 2, 3, 4, 5), ds.positions)
        self.assertEqual(("FR1", "CDR1", "CDR1", "FR2", "CDR2"), ds.region_labels)
        self.assertEqual((RegionSpan("CDR1", 2, 3), RegionSpan("CDR2", 5, 5)), ds.region_spans)
        self.assertEqual({"Casanovo": (3, 4, 0, 5, 0), "PepNet": (1, 2, 3, 4, 5)}, dict(ds.per_model_depth))
        self.assertEqual("mAb1_HC.csv", ds.source_filename)

    def test_too_short_table(self):
        with self.assertRaises(MalformedTableError):
            parse_coverage_table("Position,1,2\nSequence,A,B\n", "x_LC.csv")

    def test_bad_position_header(self):
        bad = TABLE.replace("Position,1,2", "Position,1,two")
        with self.assertRaises(MalformedTableError):
            parse_coverage_table(bad, "x_LC.csv")

    def test_ragged_model_rows_do_not_fail_table(self):
        text = "\n".join([
            "Position,1,2,3",
            "Sequence,A,C,D",
            "Region,FR1,CDR1,CDR1",
            "Casanovo,1,2,3",
            "PepNet,4,5,6,",
            "DeepNovo,1,2,3,4",
            "Novor,1,2",
        ])
        with self.assertLogs("abnovobench_ingest.core.coverage", level="WARNING") as logs:
            ds = parse_coverage_table(text, "mAb1_HC.csv")
        self.assertEqual({"Casanovo": (1, 2, 3), "PepNet": (4, 5, 6)}, dict(ds.per_model_depth))
        self.assertEqual(2, len(logs.records))

    def test_trailing_commas_on_header_rows(self):
        text = "Position,1,2,\nSequence,A,C,\nRegion,CDR1,CDR1,\nCasanovo,1,\n"
        ds = parse_coverage_table(text, "mAb1_LC.csv")
        self.assertEqual((1, 2), ds.positions)
        self.assertEqual((RegionSpan("CDR1", 1, 2),), ds.region_spans)
        self.assertEqual({"Casanovo": (1, 0)}, dict(ds.per_model_depth))

    def test_alignment_invariant(self):
        with self.assertRaises(MalformedTableError):
            CoverageDataset(antibody_id="a", chain_label="Light Chain", positions=(1, 2),
                            region_labels=("FR1",), region_spans=(), per_model_depth={})
        with self.assertRaises(MalformedTableError):
            CoverageDataset(antibody_id="a", chain_label="Light Chain", positions=(1, 2),
                            region_labels=("FR1", "FR1"), region_spans=(), per_model_depth={"m": (1,)})

    def test_chain_from_filename(self):
        self.assertEqual(("mAb2", "Light Chain"), antibody_chain_from_filename("mAb2_LC.csv"))
        self.assertEqual(("mAb2", "Heavy Chain"), antibody_chain_from_filename("mAb2_HC_v2.csv"))
        self.assertEqual(("weird", "Light Chain"), antibody_chain_from_filename("weird.csv"))


class DepthLoaderTests(unittest.TestCase):
    def _write(self, folder: Path):
        (folder / "mAb1_HC.csv").write_text(TABLE, encoding="utf-8")
        (folder / "mAb1_LC.csv").write_text(TABLE, encoding="utf-8")
        (folder / "mAb2_HC.csv").write_text(TABLE, encoding="utf-8")
        (folder / "broken_HC.csv").write_text("Position,1\n", encoding="utf-8")
        (folder / "notes.txt").write_text("ignore me", encoding="utf-8")

    def test_directory_skips_broken_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            folder = Path(tmpdir)
            self._write(folder)
            datasets = depth_loader.load_directory(folder)
            self.assertEqual(["mAb1_HC.csv", "mAb1_LC.csv", "mAb2_HC.csv"],
                             [d.source_filename for d in datasets])

    def test_antibody_filter_case_insensitive(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            folder = Path(tmpdir)
            self._write(folder)
            datasets = depth_loader.load_directory(folder, antibody="MAB1")
            self.assertEqual(["Heavy Chain", "Light Chain"], [d.chain_label for d in datasets])
            with self.assertRaises(NotFoundError):
                depth_loader.load_directory(folder, antibody="mAb9")

    def test_configured_cdr_labels(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "mAb1_HC.csv"
            p.write_text(TABLE, encoding="utf-8")
            ds = depth_loader.load(p, {"coverage": {"cdr_labels": ["CDR2"]}})
            self.assertEqual((RegionSpan("CDR2", 5, 5),), ds.region_spans)

    def test_missing_directory(self):
        with self.assertRaises(NotFoundError):
            depth_loader.load_directory(Path("/nonexistent/depth"))


if __name__ == "__main__":
    unittest.main()
