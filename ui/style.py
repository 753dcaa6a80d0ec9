"""
ui/style.py
Builds the window's QSS stylesheet from the colour and font settings.
"""

from config.settings import derive_color


def build_stylesheet(config: dict) -> str:
    primary    = config["primary_color"]
    accent     = config["accent_color"]
    background = config["background_color"]
    selection  = config["selection_color"]
    raised     = derive_color(background, 20)
    panel      = derive_color(background, 35)
    family     = config.get("font_family", "Segoe UI")
    size       = config.get("font_size", 13)

    return f"""
        QMainWindow, QWidget {{
            background-color: {background};
            color: #e0e0f0;
            font-family: '{family}';
            font-size: {size}px;
        }}
        #folderLabel {{
            background-color: {panel};
            color: {accent};
            font-size: 15px;
            font-weight: bold;
            padding: 8px 12px;
        }}
        QListWidget {{
            background-color: {background};
            border: none;
            outline: none;
        }}
        QListWidget::item {{
            padding: 4px 8px;
            border-bottom: 1px solid {raised};
        }}
        QListWidget::item:hover {{ background-color: {panel}; }}
        QListWidget::item:selected {{
            background-color: {selection};
            color: white;
        }}
        #nowPlaying {{
            background-color: {panel};
            border-top: 2px solid {primary};
        }}
        #trackLabel {{
            color: {accent};
            font-weight: bold;
        }}
        #fileLabel, #timeLabel {{
            color: #8899aa;
            font-size: 11px;
        }}
        #timeLabel {{ font-family: monospace; }}
        #controlButton {{
            background-color: {background};
            border: 1px solid {panel};
            border-radius: 6px;
            padding: 6px 12px;
        }}
        #controlButton:hover {{
            background-color: {primary};
            border-color: {primary};
            color: white;
        }}
        #controlButton:pressed {{ background-color: {selection}; }}
        QSlider::groove:horizontal {{
            background: {raised};
            height: 8px;
            border-radius: 4px;
        }}
        QSlider::sub-page:horizontal {{
            background: {primary};
            border-radius: 4px;
        }}
        QSlider::handle:horizontal {{
            background: white;
            width: 16px;
            margin: -4px 0;
            border-radius: 8px;
        }}
        #albumArt {{
            background-color: {raised};
            border-radius: 6px;
            color: {accent};
        }}
        QStatusBar {{
            background-color: {panel};
            color: #8899aa;
            font-size: 11px;
        }}
    """
