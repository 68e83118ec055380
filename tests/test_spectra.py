from pathlib import Path
import tempfile
import unittest

from abnovobench_ingest.core.errors import NotFoundError
from abnovobench_ingest.core.spectra import iter_spectra, parse_spectra, preview_spectra
from abnovobench_ingest.loaders import mgf_loader


def _block(title, peaks, seq=None, extra=()):
    lines = ["BEGIN IONS", f"TITLE={title}", "PEPMASS=512.27 1200.0", "CHARGE=2+"]
    if seq:
        lines.append(f"SEQ={seq}")
    lines.extend(extra)
    lines.extend(peaks)
    lines.append("END IONS")
    return "\n".join(lines)


def _mgf(n):
    return "\n\n".join(_block(f"scan{i}", [f"{100 + i}.5 {10 * (i + 1)}"]) for i in range(n)) + "\n"


class SpectrumBlockParserTests(unittest.TestCase):
    def test_counts_complete_blocks(self):
        spectra = parse_spectra(_mgf(4))
        self.assertEqual(4, len(spectra))
        self.assertEqual(["scan0", "scan1", "scan2", "scan3"], [s.title for s in spectra])

    def test_limit_returns_first_spectra_in_file_order(self):
        spectra = parse_spectra(_mgf(6), max_spectra=2)
        self.assertEqual(["scan0", "scan1"], [s.title for s in spectra])

    def test_non_positive_limit_yields_nothing(self):
        self.assertEqual([], parse_spectra(_mgf(3), max_spectra=0))

    def test_header_fields_keep_text_after_equals(self):
        s = parse_spectra(_block("a=b", ["100.0 1.0"], seq="PEPTIDEK"))[0]
        self.assertEqual("a=b", s.title)
        self.assertEqual("512.27 1200.0", s.precursor_mass)
        self.assertEqual("2+", s.charge)
        self.assertEqual("PEPTIDEK", s.reference_sequence)

    def test_malformed_peak_lines_are_dropped(self):
        text = _block("x", ["101.1 5", "abc 7", "102.2", "103.3\t8.5", "104.4 nope"],
                      extra=["SCANS=17", "RTINSECONDS=33.2"])
        peaks = parse_spectra(text)[0].peaks
        self.assertEqual([(101.1, 5.0), (103.3, 8.5)], [(p.mz, p.intensity) for p in peaks])

    def test_spectrum_without_peaks_is_kept(self):
        spectra = parse_spectra(_block("empty", ["garbage line", "1.0"]))
        self.assertEqual(1, len(spectra))
        self.assertEqual((), spectra[0].peaks)

    def test_unterminated_block_is_not_emitted(self):
        text = _mgf(2) + "BEGIN IONS\nTITLE=dangling\n100.0 1.0\n"
        self.assertEqual(["scan0", "scan1"], [s.title for s in parse_spectra(text)])

    def test_lines_outside_blocks_are_ignored(self):
        text = "MASS=Monoisotopic\n100.0 5.0\n" + _mgf(1) + "200.0 3.0\nTITLE=stray\n"
        spectra = parse_spectra(text)
        self.assertEqual(1, len(spectra))
        self.assertEqual(1, len(spectra[0].peaks))

    def test_empty_input(self):
        self.assertEqual([], parse_spectra(""))

    def test_generator_is_lazy(self):
        it = iter_spectra(iter(_mgf(3).splitlines()), max_spectra=None)
        self.assertEqual("scan0", next(it).title)
        self.assertEqual(2, len(list(it)))

    def test_reparse_is_structurally_identical(self):
        text = _mgf(3)
        self.assertEqual(parse_spectra(text), parse_spectra(text))

    def test_preview_passes_raw_text_through(self):
        text = _mgf(7)
        preview = preview_spectra(text, limit=5)
        self.assertEqual(5, len(preview.spectra))
        self.assertIs(text, preview.raw_content)

    def test_as_arrays(self):
        mz, inten = parse_spectra(_block("x", ["100.0 1.0", "200.0 2.0"]))[0].as_arrays()
        self.assertEqual([100.0, 200.0], mz.tolist())
        self.assertEqual([1.0, 2.0], inten.tolist())


class MgfLoaderTests(unittest.TestCase):
    def test_load_preview_uses_config_count(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "Trypsin.mgf"
            p.write_text(_mgf(4), encoding="utf-8")
            preview = mgf_loader.load_preview(p, {"spectra": {"preview_count": 3}})
            self.assertEqual(3, len(preview.spectra))
            self.assertEqual(4, len(mgf_loader.load(p)))

    def test_missing_file_is_not_found(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(NotFoundError):
                mgf_loader.load(Path(tmpdir) / "missing.mgf")


if __name__ == "__main__":
    unittest.main()
