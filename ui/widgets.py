"""
ui/widgets.py
Small reusable widgets: ClickableSlider.
"""

from PyQt6.QtWidgets import QSlider
from PyQt6.QtCore    import Qt, pyqtSignal
from PyQt6.QtGui     import QMouseEvent


class ClickableSlider(QSlider):
    """
    Slider that jumps to wherever the user clicks (not just drags).
    *released* carries the final value once the mouse button goes up, so a
    seek is issued once per gesture rather than on every move.
    """

    released = pyqtSignal(int)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self.width() > 0:
            value = round(event.position().x() / self.width() * self.maximum())
            self.setValue(max(self.minimum(), min(self.maximum(), value)))
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        super().mouseReleaseEvent(event)
        if event.button() == Qt.MouseButton.LeftButton:
            self.released.emit(self.value())
