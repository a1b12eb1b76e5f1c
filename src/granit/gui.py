import sys
import warnings
from pathlib import Path

from PyQt5 import QtWidgets

from .cipher import decrypt, encrypt
from .config import CONFIG_PATH, OUTPUT_FORMATS, load_config, save_config
from .errors import GranitError, KeyLengthWarning
from .history import log_event
from .utils import format_five_groups


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config_path: Path = CONFIG_PATH) -> None:
        super().__init__()
        self.setWindowTitle("GRANIT")
        self.resize(800, 560)
        self.config_path = config_path
        self.config = load_config(config_path)

        widget = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(widget)

        key_group = QtWidgets.QGroupBox("Keys")
        key_form = QtWidgets.QFormLayout(key_group)
        self.subkey_input = self._secret_line(self.config.subkey)
        self.key1_input = self._secret_line(self.config.key1)
        self.key2_input = self._secret_line(self.config.key2)
        self.show_keys = QtWidgets.QCheckBox("Show keys")
        self.show_keys.toggled.connect(self._toggle_key_visibility)
        key_form.addRow(QtWidgets.QLabel("Substitution key"), self.subkey_input)
        key_form.addRow(QtWidgets.QLabel("Key 1"), self.key1_input)
        key_form.addRow(QtWidgets.QLabel("Key 2"), self.key2_input)
        key_form.addRow(self.show_keys)

        self.input_text = QtWidgets.QTextEdit()
        self.input_text.setPlaceholderText("Plain text to encrypt, or cipher text to decrypt")
        self.output_text = QtWidgets.QTextEdit()
        self.output_text.setReadOnly(True)

        self.format_combo = QtWidgets.QComboBox()
        self.format_combo.addItems(OUTPUT_FORMATS)
        self.format_combo.setCurrentText(self.config.output_format)
        self.format_combo.currentTextChanged.connect(self._save_format)

        encrypt_btn = QtWidgets.QPushButton("Encrypt")
        encrypt_btn.clicked.connect(lambda: self._run("encrypt"))
        decrypt_btn = QtWidgets.QPushButton("Decrypt")
        decrypt_btn.clicked.connect(lambda: self._run("decrypt"))

        btn_row = QtWidgets.QHBoxLayout()
        btn_row.addWidget(QtWidgets.QLabel("Output format"))
        btn_row.addWidget(self.format_combo)
        btn_row.addStretch(1)
        btn_row.addWidget(encrypt_btn)
        btn_row.addWidget(decrypt_btn)

        layout.addWidget(key_group)
        layout.addWidget(QtWidgets.QLabel("Input"))
        layout.addWidget(self.input_text, 2)
        layout.addLayout(btn_row)
        layout.addWidget(QtWidgets.QLabel("Result"))
        layout.addWidget(self.output_text, 2)
        self.setCentralWidget(widget)
        self.statusBar()

    def _secret_line(self, value: str) -> QtWidgets.QLineEdit:
        line = QtWidgets.QLineEdit(value)
        line.setEchoMode(QtWidgets.QLineEdit.Password)
        return line

    def _toggle_key_visibility(self, visible: bool) -> None:
        mode = QtWidgets.QLineEdit.Normal if visible else QtWidgets.QLineEdit.Password
        for line in (self.subkey_input, self.key1_input, self.key2_input):
            line.setEchoMode(mode)

    def _save_format(self, value: str) -> None:
        self.config.output_format = value
        stored = load_config(self.config_path, use_env=False)
        stored.output_format = value
        try:
            save_config(stored, self.config_path)
        except OSError:  # pragma: no cover - GUI feedback
            self.statusBar().showMessage("Could not save settings", 5000)

    def _run(self, action: str) -> None:
        text = self.input_text.toPlainText()
        if not text.strip():
            QtWidgets.QMessageBox.warning(self, "Input error", "Please enter a text first.")
            return
        cipher_func = encrypt if action == "encrypt" else decrypt
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", KeyLengthWarning)
            try:
                result = cipher_func(
                    self.subkey_input.text(),
                    self.key1_input.text(),
                    self.key2_input.text(),
                    text,
                    min_key_length=self.config.min_key_length,
                )
            except GranitError as exc:  # pragma: no cover - GUI feedback
                QtWidgets.QMessageBox.warning(self, f"{action.capitalize()} failed", str(exc))
                return
        output_format = self.format_combo.currentText()
        self.output_text.setPlainText(format_five_groups(result) if output_format == "fiver" else result)
        self.statusBar().showMessage(" ".join(str(w.message) for w in caught), 8000)
        log_event(
            action=f"gui_{action}",
            payload={"format": output_format, "input_length": len(text), "output_length": len(result)},
        )


def run_gui(config_path: Path = CONFIG_PATH) -> None:
    app = QtWidgets.QApplication(sys.argv)
    window = MainWindow(config_path)
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    run_gui()
