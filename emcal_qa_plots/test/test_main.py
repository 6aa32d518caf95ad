import io
import os
from contextlib import redirect_stdout

from emcal_qa_plots.config import load_config
from emcal_qa_plots.errors import BadConfig
from emcal_qa_plots.main import (EXIT_CONFIG_ERROR, EXIT_NO_OUTPUT, EXIT_OK, main,
                                 make_plot_requests)
from emcal_qa_plots.test.test_qabase import COUNTS, EDGES, TestQABase


class TestConfig(TestQABase):

    def test_defaults(self):
        config = load_config()
        self.assertIsNone(config.BASE_INPUT_DIR)
        self.assertEqual(config.NORMALIZATION_HIST_NAME, "hNClusters")
        self.assertEqual(config.CONTAINER_FILENAME, "qa.root")
        self.assertTrue(config.NORMALIZE)
        self.assertEqual(len(config.PLOT_REQUESTS), 5)

    def test_file_overrides_defaults(self):
        path = self.write_config(BASE_INPUT_DIR="in", NORMALIZE=False, CUT_THRESHOLD=2)
        config = load_config(path)
        self.assertEqual(config.BASE_INPUT_DIR, "in")
        self.assertFalse(config.NORMALIZE)
        self.assertEqual(config.CUT_THRESHOLD, 2.0)
        self.assertEqual(config.NORMALIZATION_HIST_NAME, "hNClusters")

    def test_defaults_not_shared(self):
        config = load_config()
        config.PLOT_REQUESTS.clear()
        self.assertEqual(len(load_config().PLOT_REQUESTS), 5)

    def test_missing_file(self):
        with self.assertRaises(BadConfig):
            load_config(os.path.join(self.tmp_dir, "nope.py"))

    def test_broken_file(self):
        path = os.path.join(self.tmp_dir, "broken.py")
        with open(path, "w") as fhandle:
            fhandle.write("RUN_REGISTRY = [\n")
        with self.assertRaises(BadConfig):
            load_config(path)

    def test_bad_values(self):
        with self.assertRaises(BadConfig):
            load_config(self.write_config(NORMALIZATION_COUNT="mean"))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(CUT_THRESHOLD="high"))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(DPI="100"))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(DPI=0))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(ANNOTATION_POSITION=0.5))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(FIGURE_SIZE=(8,)))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(CUT_HISTOGRAMS="hClusterPt"))
        with self.assertRaises(BadConfig):
            load_config(self.write_config(CUT_HISTOGRAMS=["hClusterPt", 3]))

    def test_good_values(self):
        config = load_config(self.write_config(DPI=150, FIGURE_SIZE=[10, 7.5],
                                               ANNOTATION_POSITION=(0.1, 0.9),
                                               CUT_HISTOGRAMS=("hClusterPt",)))
        self.assertEqual(config.DPI, 150)
        self.assertEqual(config.CUT_HISTOGRAMS, ("hClusterPt",))

    def test_plot_request_selection(self):
        config = load_config()
        requests = make_plot_requests(config, ["hTotalMBD", "hClusterPt"])
        self.assertEqual([r.hist_name for r in requests], ["hTotalMBD", "hClusterPt"])
        with self.assertRaises(BadConfig):
            make_plot_requests(config, ["hNotAPlot"])
        config.PLOT_REQUESTS = []
        with self.assertRaises(BadConfig):
            make_plot_requests(config)


class TestCommandLine(TestQABase):

    def full_config(self, runs, **settings):
        values = dict(
            BASE_INPUT_DIR=self.input_dir,
            OVERLAY_OUTPUT_DIR=os.path.join(self.output_dir, "overlay"),
            SINGLE_OUTPUT_DIR_BY_HIST={
                "hClusterPt": os.path.join(self.output_dir, "Cluster_pt"),
                "hTotalMBD": os.path.join(self.output_dir, "MBD_charge"),
            },
            RUN_REGISTRY=runs,
            PLOT_REQUESTS=[
                ("hClusterPt", "Cluster p_{T} Distribution", "Cluster p_{T} (GeV)", "Counts"),
                ("hTotalMBD", "MBD Charge Distribution", "MBD Charge", "Counts"),
            ],
        )
        values.update(settings)
        return self.write_config(**values)

    def test_overlay_with_missing_run(self):
        self.write_run_file("R2", {"hClusterPt": (COUNTS, EDGES), "hTotalMBD": (COUNTS, EDGES)})
        path = self.full_config([("R1", "red", 2), ("R2", "blue", 2)])
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["overlay", "--config", path])
        self.assertEqual(code, EXIT_OK)
        for hist_name in ("hClusterPt", "hTotalMBD"):
            self.assertTrue(os.path.exists(os.path.join(self.output_dir, "overlay", f"Overlayed_{hist_name}.png")))

        log = out.getvalue()
        # one skip line per request for the run without a file
        self.assertEqual(log.count("SKIPPING run R1"), 2)
        self.assertNotIn("SKIPPING run R2", log)
        self.assertIn("Summary: requests processed: 2, runs drawn: 2, runs skipped: 2, images written: 2", log)

    def test_overlay_nothing_written(self):
        self.write_corrupt_file("R1")
        path = self.full_config([("R1", "red", 2)])
        self.assertEqual(main(["overlay", "--config", path]), EXIT_NO_OUTPUT)
        self.assertFalse(os.path.exists(os.path.join(self.output_dir, "overlay")))

    def test_single_with_cut(self):
        self.write_run_file("R1", {"hClusterPt": (COUNTS, EDGES), "hTotalMBD": (COUNTS, EDGES)})
        path = self.full_config([("R1", "red", 2)])
        code = main(["single", "--config", path, "--no-normalize", "--cut", "1.5",
                     "--cut-hist", "hClusterPt", "--hist", "hClusterPt"])
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(os.path.exists(os.path.join(self.output_dir, "Cluster_pt", "hClusterPt_Run_R1.png")))
        self.assertFalse(os.path.exists(os.path.join(self.output_dir, "MBD_charge")))

    def test_unset_paths(self):
        path = self.full_config([("R1", "red", 2)], BASE_INPUT_DIR=None)
        self.assertEqual(main(["overlay", "--config", path]), EXIT_CONFIG_ERROR)
        path = self.full_config([("R1", "red", 2)], OVERLAY_OUTPUT_DIR=None)
        self.assertEqual(main(["overlay", "--config", path]), EXIT_CONFIG_ERROR)

    def test_single_without_directory_for_histogram(self):
        path = self.full_config([("R1", "red", 2)], SINGLE_OUTPUT_DIR_BY_HIST={})
        self.assertEqual(main(["single", "--config", path]), EXIT_CONFIG_ERROR)

    def test_registry_errors(self):
        path = self.full_config([("R1", "red", 2), ("R1", "blue", 2)])
        self.assertEqual(main(["overlay", "--config", path]), EXIT_CONFIG_ERROR)
        path = self.full_config([("R1", "red", 0)])
        self.assertEqual(main(["single", "--config", path]), EXIT_CONFIG_ERROR)
        path = self.full_config([])
        self.assertEqual(main(["single", "--config", path]), EXIT_CONFIG_ERROR)

    def test_cut_histograms_given_as_string(self):
        self.write_run_file("R1")
        path = self.full_config([("R1", "red", 2)], CUT_THRESHOLD=2.0, CUT_HISTOGRAMS="hClusterPt")
        self.assertEqual(main(["single", "--config", path]), EXIT_CONFIG_ERROR)
        self.assertFalse(os.path.exists(os.path.join(self.output_dir, "Cluster_pt")))

    def test_missing_config_file(self):
        self.assertEqual(main(["overlay", "--config", os.path.join(self.tmp_dir, "nope.py")]),
                         EXIT_CONFIG_ERROR)
