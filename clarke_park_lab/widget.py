import logging

import numpy as np
from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QGridLayout, QSlider, QLabel,
    QPushButton, QCheckBox, QHBoxLayout, QGroupBox, QFrame
)
from PyQt5.QtCore import Qt, QTimer, QElapsedTimer
import pyqtgraph as pg

from .config import (
    AMPLITUDE_RANGE, SPEED_RANGE, FRAME_INTERVAL_MS,
    COLOR_BG, COLOR_PANEL, COLOR_TEXT, COLOR_ACCENT, COLOR_ACCENT_HOVER, COLOR_BORDER,
    COLOR_PHASES, COLOR_ALPHA, COLOR_BETA, COLOR_D, COLOR_Q, COLOR_RESULTANT, COLOR_PROJECTION,
)
from .history import Domain
from .transforms import ParkPair, inverse_clarke, inverse_park

logger = logging.getLogger(__name__)

# Phase axes in the stationary plane
PHASE_AXES = np.array([0, 120, 240]) * np.pi / 180
AXIS_LENGTH = 1.3
FIELD_RANGE = 1.8
TRACE_RANGE = 1.5

# Sliders work in integer steps of 0.01
SLIDER_SCALE = 100

# Configure PyQtGraph global look
pg.setConfigOption('background', COLOR_BG)
pg.setConfigOption('foreground', COLOR_TEXT)
pg.setConfigOptions(antialias=True)


class QtFrameScheduler:
    """Frame-paced tick source: QTimer on the GUI thread, timestamps from QElapsedTimer."""

    def __init__(self, interval_ms=FRAME_INTERVAL_MS, parent=None):
        self.interval_ms = interval_ms
        self._timer = QTimer(parent)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.timeout.connect(self._on_timeout)
        self._elapsed = QElapsedTimer()
        self._callback = None

    @property
    def active(self):
        return self._callback is not None

    def start(self, callback):
        self._callback = callback
        self._elapsed.start()
        self._timer.start(self.interval_ms)

    def stop(self):
        self._timer.stop()
        self._callback = None

    def _on_timeout(self):
        # timeouts are delivered by the event loop, so ticks never overlap
        if self._callback is not None:
            self._callback(self._elapsed.nsecsElapsed() / 1e9)


class ClarkeParkWidget(QWidget):
    def __init__(self, session):
        super().__init__()
        self.session = session
        self.setWindowTitle("Clarke & Park Transform Visualization")
        self.resize(1400, 1000)
        self.apply_stylesheet()

        state = session.current_state()

        # Main Layout (Horizontal: Sidebar + Content)
        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- Sidebar ---
        sidebar = QFrame()
        sidebar.setObjectName("Sidebar")
        sidebar.setFixedWidth(300)
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(15, 15, 15, 15)
        sidebar_layout.setSpacing(15)

        title_label = QLabel("Controls")
        title_label.setObjectName("SidebarTitle")
        title_label.setAlignment(Qt.AlignCenter)
        sidebar_layout.addWidget(title_label)

        # 1. Playback Controls
        group_playback = QGroupBox("Playback")
        layout_playback = QVBoxLayout()

        self.angle_label = QLabel()
        hbox_buttons = QHBoxLayout()
        self.play_button = QPushButton()
        self.play_button.clicked.connect(lambda checked=False: self.session.toggle_playing())
        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(lambda checked=False: self.session.reset())
        hbox_buttons.addWidget(self.play_button)
        hbox_buttons.addWidget(self.reset_button)

        layout_playback.addWidget(self.angle_label)
        layout_playback.addLayout(hbox_buttons)
        group_playback.setLayout(layout_playback)
        sidebar_layout.addWidget(group_playback)

        # 2. Parameters
        group_params = QGroupBox("Parameters")
        layout_params = QGridLayout()

        self.speed_label = QLabel()
        self.speed_slider = self.create_slider(SPEED_RANGE, state.speed)
        self.speed_slider.valueChanged.connect(self.update_speed)
        layout_params.addWidget(self.speed_label, 0, 0)
        layout_params.addWidget(self.speed_slider, 1, 0)

        self.amp_label = QLabel()
        self.amp_slider = self.create_slider(AMPLITUDE_RANGE, state.amplitude)
        self.amp_slider.valueChanged.connect(self.update_amplitude)
        layout_params.addWidget(self.amp_label, 2, 0)
        layout_params.addWidget(self.amp_slider, 3, 0)

        group_params.setLayout(layout_params)
        sidebar_layout.addWidget(group_params)

        # 3. Visualization Options
        group_viz = QGroupBox("Visualization")
        layout_viz = QVBoxLayout()
        self.projections_checkbox = QCheckBox("Show Projections")
        self.projections_checkbox.setChecked(state.show_projections)
        self.projections_checkbox.stateChanged.connect(
            lambda state: self.session.set_show_projections(self.projections_checkbox.isChecked())
        )
        layout_viz.addWidget(self.projections_checkbox)
        group_viz.setLayout(layout_viz)
        sidebar_layout.addWidget(group_viz)

        # 4. Live values
        group_values = QGroupBox("Instantaneous Values")
        layout_values = QVBoxLayout()
        self.values_label = QLabel()
        self.values_label.setObjectName("Readout")
        layout_values.addWidget(self.values_label)
        group_values.setLayout(layout_values)
        sidebar_layout.addWidget(group_values)

        sidebar_layout.addStretch()
        main_layout.addWidget(sidebar)

        # --- Content Area (Plots) ---
        content_widget = QWidget()
        grid = QGridLayout(content_widget)
        grid.setContentsMargins(10, 10, 10, 10)
        grid.setSpacing(10)

        self.field_abc = self.create_field("Three-Phase System (abc)")
        self.field_clarke = self.create_field("Clarke Domain (αβ)")
        self.field_park = self.create_field("Park Domain (dq)")
        grid.addWidget(self.field_abc, 0, 0)
        grid.addWidget(self.field_clarke, 1, 0)
        grid.addWidget(self.field_park, 2, 0)

        self.plot_abc = self.create_signal_plot("Signals: abc")
        self.plot_clarke = self.create_signal_plot("Signals: αβ")
        self.plot_park = self.create_signal_plot("Signals: dq")
        grid.addWidget(self.plot_abc, 0, 1)
        grid.addWidget(self.plot_clarke, 1, 1)
        grid.addWidget(self.plot_park, 2, 1)

        for row in range(3):
            grid.setRowStretch(row, 1)
        grid.setColumnStretch(0, 1)
        grid.setColumnStretch(1, 2)

        main_layout.addWidget(content_widget)

        # --- Initialization of Graphics Items ---

        # Static axes
        for angle in PHASE_AXES:
            self.field_abc.plot([0, AXIS_LENGTH * np.cos(angle)], [0, AXIS_LENGTH * np.sin(angle)],
                                pen=pg.mkPen(COLOR_PROJECTION, width=1, style=Qt.DashLine))
        for field in (self.field_clarke, self.field_park):
            field.plot([-AXIS_LENGTH, AXIS_LENGTH], [0, 0], pen=pg.mkPen(COLOR_PROJECTION, width=1, style=Qt.DashLine))
            field.plot([0, 0], [-AXIS_LENGTH, AXIS_LENGTH], pen=pg.mkPen(COLOR_PROJECTION, width=1, style=Qt.DashLine))

        # Rotating dq axes drawn in the stationary plane
        self.rotating_axes = [
            self.field_clarke.plot([], [], pen=pg.mkPen(c, width=1, style=Qt.DotLine)) for c in (COLOR_D, COLOR_Q)
        ]

        # Vectors
        self.lines_abc, self.tips_abc = self.create_vectors(self.field_abc, COLOR_PHASES)
        self.lines_clarke, self.tips_clarke = self.create_vectors(self.field_clarke, [COLOR_ALPHA, COLOR_BETA])
        self.lines_park, self.tips_park = self.create_vectors(self.field_park, [COLOR_D, COLOR_Q])

        self.projections_abc = self.create_projections(self.field_abc, COLOR_PHASES)
        self.projections_clarke = self.create_projections(self.field_clarke, [COLOR_ALPHA, COLOR_BETA])
        self.projections_park = self.create_projections(self.field_park, [COLOR_D, COLOR_Q])

        self.resultant_line_abc, self.resultant_tip_abc = self.create_resultant(self.field_abc)
        self.resultant_line_clarke, self.resultant_tip_clarke = self.create_resultant(self.field_clarke)
        self.resultant_line_park, self.resultant_tip_park = self.create_resultant(self.field_park)

        # Waveform traces, newest sample at x = 0
        self.trace_x = -np.arange(session.config.history_length)
        self.curves = {
            Domain.ABC: self.create_curves(self.plot_abc, Domain.ABC, COLOR_PHASES),
            Domain.ALPHABETA: self.create_curves(self.plot_clarke, Domain.ALPHABETA, [COLOR_ALPHA, COLOR_BETA]),
            Domain.DQ: self.create_curves(self.plot_park, Domain.DQ, [COLOR_D, COLOR_Q]),
        }

        self.session.add_listener(self.on_session_changed)
        self.update_plots()

    def apply_stylesheet(self):
        self.setStyleSheet(f"""
            QWidget {{
                background-color: {COLOR_BG};
                color: {COLOR_TEXT};
                font-family: 'Segoe UI', sans-serif;
                font-size: 10pt;
            }}
            QFrame#Sidebar {{
                background-color: {COLOR_PANEL};
                border-right: 1px solid {COLOR_BORDER};
            }}
            QLabel#SidebarTitle {{
                font-size: 14pt;
                font-weight: bold;
                color: {COLOR_ACCENT};
                margin-bottom: 10px;
            }}
            QLabel#Readout {{
                font-family: 'Consolas', monospace;
            }}
            QGroupBox {{
                border: 1px solid {COLOR_BORDER};
                border-radius: 6px;
                margin-top: 12px;
                padding-top: 10px;
                font-weight: bold;
            }}
            QGroupBox::title {{
                subcontrol-origin: margin;
                subcontrol-position: top left;
                padding: 0 5px;
                left: 10px;
                color: {COLOR_ACCENT};
            }}
            QPushButton {{
                background-color: {COLOR_ACCENT};
                color: white;
                border: none;
                border-radius: 4px;
                padding: 6px 12px;
                font-weight: bold;
            }}
            QPushButton:hover {{
                background-color: {COLOR_ACCENT_HOVER};
            }}
            QPushButton:pressed {{
                background-color: #005c99;
            }}
            QSlider::groove:horizontal {{
                border: 1px solid {COLOR_BORDER};
                height: 6px;
                background: {COLOR_BG};
                margin: 2px 0;
                border-radius: 3px;
            }}
            QSlider::handle:horizontal {{
                background: {COLOR_ACCENT};
                border: 1px solid {COLOR_ACCENT};
                width: 14px;
                height: 14px;
                margin: -5px 0;
                border-radius: 7px;
            }}
            QCheckBox {{
                spacing: 8px;
            }}
            QCheckBox::indicator {{
                width: 16px;
                height: 16px;
                border: 1px solid {COLOR_BORDER};
                border-radius: 3px;
                background: {COLOR_BG};
            }}
            QCheckBox::indicator:checked {{
                background: {COLOR_ACCENT};
                border-color: {COLOR_ACCENT};
            }}
        """)

    def create_slider(self, value_range, value):
        slider = QSlider(Qt.Horizontal)
        slider.setMinimum(int(round(value_range[0] * SLIDER_SCALE)))
        slider.setMaximum(int(round(value_range[1] * SLIDER_SCALE)))
        slider.setValue(int(round(value * SLIDER_SCALE)))
        return slider

    def create_field(self, title):
        field = pg.PlotWidget(title=title)
        field.setXRange(-FIELD_RANGE, FIELD_RANGE)
        field.setYRange(-FIELD_RANGE, FIELD_RANGE)
        field.setAspectLocked(True)
        field.showGrid(x=True, y=True, alpha=0.3)
        field.getPlotItem().setTitle(title, color=COLOR_TEXT, size='11pt')
        return field

    def create_signal_plot(self, title):
        plot = pg.PlotWidget(title=title)
        plot.addLegend(offset=(10, 10))
        plot.showGrid(x=True, y=True, alpha=0.3)
        plot.setYRange(-TRACE_RANGE, TRACE_RANGE)
        plot.getPlotItem().setTitle(title, color=COLOR_TEXT, size='11pt')
        return plot

    def create_curves(self, plot, domain, colors):
        return [plot.plot([], [], pen=pg.mkPen(c, width=2), name=label) for c, label in zip(colors, domain.labels)]

    def create_vectors(self, field, colors):
        lines = [pg.PlotDataItem(pen=pg.mkPen(c, width=3)) for c in colors]
        tips = [pg.ScatterPlotItem(size=12, brush=c, pen=None) for c in colors]
        for line, tip in zip(lines, tips):
            field.addItem(line)
            field.addItem(tip)
        return lines, tips

    def create_projections(self, field, colors):
        lines = [pg.PlotDataItem(pen=pg.mkPen(c, width=1, style=Qt.DashLine)) for c in colors]
        for line in lines:
            field.addItem(line)
        return lines

    def create_resultant(self, field):
        line = pg.PlotDataItem(pen=pg.mkPen(COLOR_RESULTANT, width=4))
        tip = pg.ScatterPlotItem(size=16, brush=COLOR_RESULTANT, pen=None)
        field.addItem(line)
        field.addItem(tip)
        return line, tip

    # --- Commands from controls ---

    def update_speed(self, value):
        self.session.set_speed(value / SLIDER_SCALE)

    def update_amplitude(self, value):
        self.session.set_amplitude(value / SLIDER_SCALE)

    # --- Drawing ---

    def on_session_changed(self, session):
        self.update_plots()

    def update_plots(self):
        state = self.session.current_state()
        phase = self.session.current_phase()
        clarke = self.session.current_clarke()
        park = self.session.current_park()
        show = state.show_projections
        # abc rebuilt from dq, closes the loop for the reader
        restored = inverse_clarke(inverse_park(park, state.angle))

        self.play_button.setText("Pause" if state.is_playing else "Play")
        self.angle_label.setText(f"Angle: {np.degrees(state.angle):6.1f}°")
        self.speed_label.setText(f"Speed: {state.speed:.2f} Hz")
        self.amp_label.setText(f"Amplitude: {state.amplitude:.2f}")
        self.values_label.setText(
            f"a = {phase.a:+.3f}  b = {phase.b:+.3f}  c = {phase.c:+.3f}\n"
            f"α = {clarke.alpha:+.3f}  β = {clarke.beta:+.3f}\n"
            f"d = {park.d:+.3f}  q = {park.q:+.3f}\n"
            f"dq→abc: {restored.a:+.3f} {restored.b:+.3f} {restored.c:+.3f}"
        )

        # abc: phase vectors along their axes, resultant is the αβ space vector
        vectors_abc = [(v * np.cos(axis), v * np.sin(axis)) for v, axis in zip(phase, PHASE_AXES)]
        self.update_field_vectors(self.lines_abc, self.tips_abc, vectors_abc if show else [],
                                  self.resultant_line_abc, self.resultant_tip_abc, clarke)
        self.update_projections(self.projections_abc, vectors_abc, clarke, show)

        vectors_clarke = [(clarke.alpha, 0.0), (0.0, clarke.beta)]
        self.update_field_vectors(self.lines_clarke, self.tips_clarke, vectors_clarke,
                                  self.resultant_line_clarke, self.resultant_tip_clarke, clarke)
        self.update_projections(self.projections_clarke, vectors_clarke, clarke, show)
        self.update_rotating_axes(state.angle)

        vectors_park = [(park.d, 0.0), (0.0, park.q)]
        self.update_field_vectors(self.lines_park, self.tips_park, vectors_park,
                                  self.resultant_line_park, self.resultant_tip_park, park)
        self.update_projections(self.projections_park, vectors_park, park, show)

        for domain, curves in self.curves.items():
            data = self.session.history_array(domain)
            for i, curve in enumerate(curves):
                curve.setData(self.trace_x, data[:, i])

    def update_field_vectors(self, lines, tips, vectors, resultant_line, resultant_tip, resultant):
        for i, (line, tip) in enumerate(zip(lines, tips)):
            if i < len(vectors):
                x, y = vectors[i]
                line.setData([0, x], [0, y])
                tip.setData([x], [y])
            else:
                line.setData([], [])
                tip.setData([], [])
        x_res, y_res = resultant
        resultant_line.setData([0, x_res], [0, y_res])
        resultant_tip.setData([x_res], [y_res])

    def update_projections(self, lines, vectors, resultant, show):
        x_res, y_res = resultant
        for line, (x, y) in zip(lines, vectors):
            if show:
                line.setData([x, x_res], [y, y_res])
            else:
                line.setData([], [])

    def update_rotating_axes(self, angle):
        d_axis = inverse_park(ParkPair(AXIS_LENGTH, 0.0), angle)
        q_axis = inverse_park(ParkPair(0.0, AXIS_LENGTH), angle)
        for item, tip in zip(self.rotating_axes, (d_axis, q_axis)):
            item.setData([0, tip[0]], [0, tip[1]])

    def closeEvent(self, event):
        self.session.remove_listener(self.on_session_changed)
        self.session.stop()
        logger.info("window closed")
        super().closeEvent(event)
