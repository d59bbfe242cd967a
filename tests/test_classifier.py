"""Tests for the file classifier."""

from symfony_review.classifier import CATEGORIES, FileClassifier

PATHS = [
    "src/Controller/UserController.php",
    "src/Entity/User.php",
    "src/Repository/UserRepository.php",
    "src/Service/Mailer/MailerService.php",
    "tests/Controller/UserControllerTest.php",
    "templates/user/index.html.twig",
    "migrations/Version20240101.php",
    "src/Migrations/Version20240102.php",
    "assets/app.js",
    "assets/styles/app.scss",
]


class TestClassify:
    def test_single_controller(self):
        counts = FileClassifier().classify(["src/Controller/UserController.php"])
        assert counts["Controller"] == 1
        assert {k: v for k, v in counts.items() if v} == {"Controller": 1}

    def test_overlapping_categories(self):
        counts = FileClassifier().classify(["tests/Controller/UserControllerTest.php"])
        assert counts["Controller"] == 1
        assert counts["Test"] == 1

    def test_counts_bounded_by_input(self):
        counts = FileClassifier().classify(PATHS)
        assert all(count <= len(PATHS) for count in counts.values())
        assert counts["Controller"] == 2
        assert counts["Entity"] == 1
        assert counts["Repository"] == 1
        assert counts["Service"] == 1
        assert counts["Template"] == 1
        assert counts["Migration"] == 1

    def test_sum_may_exceed_input(self):
        paths = ["src/Controller/Admin/EntityController.php"]
        counts = FileClassifier().classify(paths)
        assert sum(counts.values()) > len(paths)

    def test_order_independent(self):
        classifier = FileClassifier()
        assert classifier.classify(PATHS) == classifier.classify(list(reversed(PATHS)))

    def test_case_sensitive(self):
        counts = FileClassifier().classify(["src/controller/users.php"])
        assert counts["Controller"] == 0

    def test_empty_input(self):
        counts = FileClassifier().classify([])
        assert list(counts) == [label for label, _ in CATEGORIES]
        assert set(counts.values()) == {0}


class TestDistribution:
    def test_by_suffix(self):
        dist = FileClassifier().distribution(PATHS)
        assert dist == {"PHP": 7, "Twig": 1, "JavaScript": 1, "CSS/SCSS": 1}

    def test_custom_file_types(self):
        classifier = FileClassifier(file_types=[("YAML", lambda p: p.endswith(".yaml"))])
        assert classifier.distribution(["config/services.yaml", "a.php"]) == {"YAML": 1}
