"""Animated Galton box (quincunx): beans fall through a triangular pin lattice
and pile up into a histogram that approximates a binomial distribution."""
from __future__ import annotations

import argparse
import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final, Iterator, List, Optional, Protocol, Sequence, Tuple, TypeAlias

from PIL import Image, ImageDraw

Pixel: TypeAlias = float
Count: TypeAlias = int
Color: TypeAlias = Tuple[int, int, int]
Point: TypeAlias = Tuple[Pixel, Pixel]


@dataclass(frozen=True)
class BoardConfig:
    NUM_PINS_HORIZONTAL: Final[int] = 5
    PIN_RADIUS: Final[int] = 10
    MARGIN_SPACE: Final[int] = 70
    PIN_TOP_OFFSET: Final[int] = 15
    KEY_FRAME_ANIMATION_STEPS: Final[int] = 5

    MIN_SETTING: Final[int] = 1
    MAX_SETTING: Final[int] = 10
    FAIR_BIAS: Final[int] = 5
    DEFAULT_SPEED: Final[int] = 5
    DRAW_MIN: Final[int] = 1
    DRAW_MAX: Final[int] = 10

    FUNNEL_EXIT_Y: Final[int] = 30
    FUNNEL_TOP_HALF_WIDTH: Final[int] = 50
    FUNNEL_BOTTOM_HALF_WIDTH: Final[int] = 30
    BAR_GRAPH_HEIGHT: Final[int] = 140
    BAR_GAP: Final[int] = 40
    BIN_DIVIDER_OVERHANG: Final[int] = 30
    LABEL_OFFSET: Final[int] = 8
    CANVAS_BOTTOM_MARGIN: Final[int] = 40
    GAUSSIAN_WIDTH_FACTOR: Final[float] = 7.0
    CURVE_LINE_WIDTH: Final[int] = 3

    BACKGROUND_COLOR: Final[Color] = (255, 255, 255)
    PIN_COLOR: Final[Color] = (255, 0, 0)
    PIN_FILL_COLOR: Final[Color] = (153, 255, 102)
    FUNNEL_COLOR: Final[Color] = (255, 255, 0)
    BEAN_COLOR: Final[Color] = (255, 0, 0)
    BAR_COLOR: Final[Color] = (255, 0, 0)
    CURVE_COLOR: Final[Color] = (0, 0, 255)
    OUTLINE_COLOR: Final[Color] = (0, 0, 0)

    PROGRESS_DIVISIONS: Final[int] = 20
    DEFAULT_BEANS: Final[int] = 10
    DEFAULT_ANIMATION_FILENAME: Final[str] = "quincunx.gif"
    DEFAULT_HISTOGRAM_FILENAME: Final[str] = "quincunx.png"
    LOG_FORMAT: Final[str] = "%(levelname)s: %(message)s"


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


def _validate_setting(name: str, value: int) -> None:
    if not BoardConfig.MIN_SETTING <= value <= BoardConfig.MAX_SETTING:
        raise ValueError(
            f"{name} must be in [{BoardConfig.MIN_SETTING}, "
            f"{BoardConfig.MAX_SETTING}], got {value}."
        )


@dataclass
class Settings:
    bias: int = BoardConfig.FAIR_BIAS
    speed: int = BoardConfig.DEFAULT_SPEED
    is_running: bool = True
    frame_delay: float = field(init=False)

    def __post_init__(self) -> None:
        _validate_setting("Bias", self.bias)
        _validate_setting("Speed", self.speed)
        self.frame_delay = self._calculate_frame_delay()

    def _calculate_frame_delay(self) -> float:
        return 1000 / (self.speed * 10)

    @property
    def is_fair(self) -> bool:
        return self.bias == BoardConfig.FAIR_BIAS

    def set_speed(self, speed: int) -> None:
        _validate_setting("Speed", speed)
        self.speed = speed
        self.frame_delay = self._calculate_frame_delay()

    def set_bias(self, bias: int) -> None:
        _validate_setting("Bias", bias)
        self.bias = bias

    def pause(self) -> None:
        self.is_running = False

    def resume(self) -> None:
        self.is_running = True


@dataclass(frozen=True)
class Pin:
    x: Pixel
    y: Pixel
    radius: int
    color: Color
    visible: bool


@dataclass(frozen=True)
class Bean:
    # Columns are 1-based; row counts down from `height` (top) to the bins.
    column: int
    row: int

    @classmethod
    def start(cls, width: int, height: int) -> Bean:
        return cls(column=math.ceil(width / 2), row=height)

    def index(self, width: int, height: int) -> int:
        line = height - self.row
        return width * line + (self.column - 1)


@dataclass
class Lattice:
    width: int = BoardConfig.NUM_PINS_HORIZONTAL
    height: int = BoardConfig.NUM_PINS_HORIZONTAL
    spacing: int = BoardConfig.MARGIN_SPACE
    radius: int = BoardConfig.PIN_RADIUS
    pins: List[Pin] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._validate_dimensions()
        self.pins = list(self._build_pins())

    def _validate_dimensions(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("Lattice dimensions must be at least 1.")
        if self.width != self.height:
            raise ValueError(
                f"Lattice must be square, got {self.width}x{self.height}."
            )
        if self.spacing <= 0 or self.radius <= 0:
            raise ValueError("Pin spacing and radius must be positive.")

    @property
    def middle_column(self) -> int:
        return self.width // 2

    @property
    def row_offset(self) -> Pixel:
        return self.spacing / 2

    def _build_pins(self) -> Iterator[Pin]:
        for row in range(self.height):
            offset = 0.0 if row % 2 == 0 else self.row_offset
            # The last row is the bin strip and never shows pins.
            shown = set() if row == self.height - 1 else set(self.visible_columns(row))
            for column in range(self.width):
                yield Pin(
                    x=self.spacing * column + self.spacing + offset,
                    y=BoardConfig.PIN_TOP_OFFSET + self.spacing * row + self.spacing,
                    radius=self.radius,
                    color=BoardConfig.PIN_COLOR,
                    visible=column in shown,
                )

    def visible_columns(self, row: int) -> List[int]:
        """Columns forming the triangle on ``row``: the middle column first,
        then alternately one further left and one further right."""
        middle = self.middle_column
        columns = [middle]
        for k in range(1, row + 1):
            offset = math.ceil(k / 2)
            columns.append(middle + offset if k % 2 == 0 else middle - offset)
        return columns

    def index(self, column: int, row: int) -> int:
        if not (0 <= column < self.width and 0 <= row < self.height):
            raise ValueError(f"Cell ({column}, {row}) is outside the lattice.")
        return row * self.width + column

    def coordinates(self, index: int) -> Tuple[int, int]:
        row, column = divmod(index, self.width)
        return column, row

    def pin_at(self, column: int, row: int) -> Pin:
        return self.pins[self.index(column, row)]

    def bean_pin(self, bean: Bean) -> Pin:
        return self.pins[bean.index(self.width, self.height)]

    def visible_pins(self) -> Iterator[Pin]:
        return (pin for pin in self.pins if pin.visible)


class BeanPath:
    def __init__(
        self,
        width: int,
        height: int,
        settings: Settings,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.settings = settings
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.history: List[Bean] = [Bean.start(width, height)]

    def __len__(self) -> int:
        return len(self.history)

    def get_row(self, row: int) -> Bean:
        """Return the bean snapshot for path row ``row`` (0 is the start).

        Rows already computed are looked up without touching the RNG. Missing
        rows are filled in order, one RNG draw each, the first time any of
        them is requested.
        """
        if row < 0:
            raise ValueError(f"Path rows start at 0, got {row}.")
        while len(self.history) <= row:
            self.history.append(self.next_position(self.history[-1]))
        return self.history[row]

    def final_bean(self) -> Bean:
        return self.get_row(self.height - 1)

    def next_position(self, bean: Bean) -> Bean:
        draw = self.rng.randint(BoardConfig.DRAW_MIN, BoardConfig.DRAW_MAX)
        center = math.ceil(self.width / 2)
        column = bean.column

        if column == center - bean.row - 1:
            column += 1
        elif column == center + bean.row:
            column -= 1
        elif draw > self.settings.bias:
            if (bean.row - 1) % 2 != 0:
                column += 1
        elif (bean.row - 1) % 2 == 0:
            column -= 1

        row = bean.row - 1 if bean.row >= 1 else bean.row
        return Bean(column=column, row=row)


@dataclass(frozen=True)
class DistributionStatistics:
    max_value: Count
    mode_column: int
    mean: float
    sum_squared_diff: float
    standard_deviation: float


@dataclass
class Distribution:
    width: int
    counts: List[Count] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError("Distribution needs at least one column.")
        self.reset()

    def reset(self) -> None:
        self.counts = [0] * self.width

    @property
    def total(self) -> int:
        return sum(self.counts)

    def record_outcome(self, column: int) -> None:
        if not 0 <= column < self.width:
            raise ValueError(f"Column {column} is outside [0, {self.width}).")
        self.counts[column] += 1

    def compute_statistics(
        self, peak_height: float = BoardConfig.BAR_GRAPH_HEIGHT
    ) -> DistributionStatistics:
        max_value, mode_column = -1, 0
        for column, count in enumerate(self.counts):
            if count > max_value:
                max_value, mode_column = count, column

        # The peak count stands in for the mean when fitting the curve.
        mean = float(max_value)
        sum_squared_diff = 0.0
        for count in self.counts:
            # Assigned, not accumulated: only the last column survives.
            sum_squared_diff = (count - mean) * (count - mean)

        if mean > 0:
            scale = peak_height / mean
            standard_deviation = math.sqrt(sum_squared_diff / mean) * scale
        else:
            standard_deviation = 0.0

        return DistributionStatistics(
            max_value=max_value,
            mode_column=mode_column,
            mean=mean,
            sum_squared_diff=sum_squared_diff,
            standard_deviation=standard_deviation,
        )


def gaussian(
    x: float, amplitude: float, standard_deviation: float, center: float
) -> float:
    width = standard_deviation * BoardConfig.GAUSSIAN_WIDTH_FACTOR
    if width <= 0:
        return 0.0
    return amplitude * math.exp(-((x - center) * (x - center)) / (2 * width * width))


@dataclass(frozen=True)
class Bar:
    x: Pixel
    y: Pixel
    width: Pixel
    height: Pixel
    count: Count


@dataclass(frozen=True)
class HistogramOverlay:
    top: Pixel
    height: Pixel
    bars: Tuple[Bar, ...]
    curve: Tuple[Point, ...]
    dividers: Tuple[Tuple[Point, Point], ...]
    labels: Tuple[Tuple[Point, str], ...]
    statistics: DistributionStatistics

    @staticmethod
    def top_for(lattice: Lattice) -> Pixel:
        anchor = lattice.pin_at(0, max(lattice.height - 2, 0))
        return anchor.y + anchor.radius + lattice.spacing

    @classmethod
    def build(
        cls, lattice: Lattice, distribution: Distribution, settings: Settings
    ) -> HistogramOverlay:
        top = cls.top_for(lattice)
        height = float(BoardConfig.BAR_GRAPH_HEIGHT)
        row_offset = lattice.row_offset
        bar_width = lattice.spacing - BoardConfig.BAR_GAP
        statistics = distribution.compute_statistics(height)

        focus = (
            lattice.middle_column if settings.is_fair else statistics.mode_column
        )
        bars: List[Bar] = []
        labels: List[Tuple[Point, str]] = []
        center = 0.0
        for column, count in enumerate(distribution.counts):
            pin = lattice.pin_at(column, 0)
            x = pin.x - row_offset + pin.radius * 2
            value = height * count / statistics.max_value if statistics.max_value > 0 else 0.0
            bars.append(Bar(x=x, y=top + height - value, width=bar_width, height=value, count=count))
            labels.append(((x, top + height + BoardConfig.LABEL_OFFSET), str(count)))
            if column == focus:
                center = x + bar_width / 2

        span = lattice.spacing * (lattice.width + 1) + row_offset - BoardConfig.BAR_GAP
        curve = tuple(
            (float(x), top + height - gaussian(x, height, statistics.standard_deviation, center))
            for x in range(int(span))
        )

        dividers = tuple(
            (
                (lattice.pin_at(column, 0).x - row_offset, top - BoardConfig.BIN_DIVIDER_OVERHANG),
                (lattice.pin_at(column, 0).x - row_offset, top + height),
            )
            for column in range(1, lattice.width)
        )

        return cls(
            top=top,
            height=height,
            bars=tuple(bars),
            curve=curve,
            dividers=dividers,
            labels=tuple(labels),
            statistics=statistics,
        )


class AnimationState(Enum):
    PRE_LAUNCH = "pre_launch"
    IN_TRANSIT = "in_transit"
    ARRIVED = "arrived"


@dataclass(frozen=True)
class BeanFrame:
    x: Pixel
    y: Pixel
    radius: int
    state: AnimationState
    animation_index: int
    sub_index: int


class AnimationController:
    def __init__(
        self,
        lattice: Lattice,
        distribution: Distribution,
        settings: Settings,
        rng: Optional[RandomSource] = None,
        steps: int = BoardConfig.KEY_FRAME_ANIMATION_STEPS,
    ) -> None:
        if steps < 1:
            raise ValueError("Key frame steps must be at least 1.")
        if lattice.height < 2:
            raise ValueError("Animation needs at least one pin row above the bins.")
        if distribution.width != lattice.width:
            raise ValueError("Distribution and lattice widths differ.")
        self.lattice = lattice
        self.distribution = distribution
        self.settings = settings
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.steps = steps
        self.beans_dropped = 0
        self.last_frame: Optional[BeanFrame] = None
        self.restart()

    def restart(self) -> None:
        self.state = AnimationState.PRE_LAUNCH
        self.animation_index = 0
        self.sub_index = 0
        self.path = BeanPath(
            self.lattice.width, self.lattice.height, self.settings, self.rng
        )

    def tick(self) -> BeanFrame:
        if self.state is AnimationState.ARRIVED:
            self.restart()
        if self.state is AnimationState.PRE_LAUNCH:
            frame = self._step_pre_launch()
        else:
            frame = self._step_in_transit()
        self.last_frame = frame
        return frame

    def _frame(self, x: Pixel, y: Pixel, radius: int) -> BeanFrame:
        return BeanFrame(
            x=x,
            y=y,
            radius=radius,
            state=self.state,
            animation_index=self.animation_index,
            sub_index=self.sub_index,
        )

    def _step_pre_launch(self) -> BeanFrame:
        target = self.lattice.pin_at(self.lattice.middle_column, 0)
        delta_y = (target.y - BoardConfig.FUNNEL_EXIT_Y) / self.steps
        frame = self._frame(
            target.x,
            BoardConfig.FUNNEL_EXIT_Y + self.lattice.radius + delta_y * self.sub_index,
            self.lattice.radius,
        )

        self.sub_index += 1
        if self.sub_index == self.steps:
            self.sub_index = 0
            self.animation_index = 1
            self.state = AnimationState.IN_TRANSIT
        return frame

    def _step_in_transit(self) -> BeanFrame:
        bean_last = self.path.get_row(self.animation_index - 1)
        bean_current = self.path.get_row(self.animation_index)
        pin_last = self.lattice.bean_pin(bean_last)
        pin_current = self.lattice.bean_pin(bean_current)

        delta_x = (pin_current.x - pin_last.x) / self.steps
        delta_y = (pin_current.y - pin_last.y) / self.steps
        frame = self._frame(
            pin_last.x + delta_x * self.sub_index,
            pin_last.y + delta_y * self.sub_index,
            pin_last.radius,
        )

        self.sub_index += 1
        if self.sub_index == self.steps:
            self.sub_index = 0
            self.animation_index += 1
            if bean_current.row == 1:
                self.distribution.record_outcome(bean_current.column - 1)
                self.beans_dropped += 1
                logging.debug(
                    f"Bean {self.beans_dropped} landed in bin {bean_current.column - 1}."
                )

        if self.animation_index == self.lattice.height:
            self.animation_index = 0
            self.state = AnimationState.ARRIVED
        return frame

    def frames_per_bean(self) -> int:
        return self.steps * self.lattice.height


class BeanMachine:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        width: int = BoardConfig.NUM_PINS_HORIZONTAL,
        rng: Optional[RandomSource] = None,
        steps: int = BoardConfig.KEY_FRAME_ANIMATION_STEPS,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.lattice = Lattice(width=width, height=width)
        self.distribution = Distribution(width)
        self.controller = AnimationController(
            self.lattice, self.distribution, self.settings, self.rng, steps
        )

    def tick(self) -> Optional[BeanFrame]:
        if not self.settings.is_running:
            return None
        return self.controller.tick()

    def reset(self) -> None:
        self.distribution.reset()
        self.controller.restart()
        logging.info("Distribution cleared; next bean restarts at the funnel.")

    def drop_bean(self) -> int:
        path = BeanPath(self.lattice.width, self.lattice.height, self.settings, self.rng)
        column = path.final_bean().column - 1
        self.distribution.record_outcome(column)
        return column

    def simulate(self, num_beans: int) -> List[Count]:
        if num_beans <= 0:
            raise ValueError("Number of beans must be positive.")
        progress_step = max(1, num_beans // BoardConfig.PROGRESS_DIVISIONS)
        for i in range(1, num_beans + 1):
            self.drop_bean()
            if i % progress_step == 0:
                logging.info(f"Simulated {i}/{num_beans} beans.")
        return list(self.distribution.counts)

    def overlay(self) -> HistogramOverlay:
        return HistogramOverlay.build(self.lattice, self.distribution, self.settings)


class FrameRenderer:
    def __init__(self, machine: BeanMachine) -> None:
        self.machine = machine
        lattice = machine.lattice
        width = lattice.spacing * (lattice.width + 1) + lattice.row_offset
        height = (
            HistogramOverlay.top_for(lattice)
            + BoardConfig.BAR_GRAPH_HEIGHT
            + BoardConfig.CANVAS_BOTTOM_MARGIN
        )
        self.size: Tuple[int, int] = (int(width), int(height))

    def render(self, frame: Optional[BeanFrame] = None) -> Image.Image:
        image = Image.new("RGB", self.size, BoardConfig.BACKGROUND_COLOR)
        draw = ImageDraw.Draw(image)
        self._draw_funnel(draw)
        self._draw_pins(draw)
        self._draw_distribution(draw, self.machine.overlay())
        if frame is not None:
            self._draw_circle(draw, frame.x, frame.y, frame.radius, BoardConfig.BEAN_COLOR)
        return image

    @staticmethod
    def _draw_circle(
        draw: ImageDraw.ImageDraw, x: Pixel, y: Pixel, radius: int, fill: Color
    ) -> None:
        draw.ellipse(
            (x - radius, y - radius, x + radius, y + radius),
            fill=fill,
            outline=BoardConfig.OUTLINE_COLOR,
        )

    def _draw_funnel(self, draw: ImageDraw.ImageDraw) -> None:
        lattice = self.machine.lattice
        middle = lattice.pin_at(lattice.middle_column, 0)
        top, bottom = BoardConfig.FUNNEL_TOP_HALF_WIDTH, BoardConfig.FUNNEL_BOTTOM_HALF_WIDTH
        draw.polygon(
            [
                (middle.x - top, 0),
                (middle.x + top, 0),
                (middle.x + bottom, BoardConfig.FUNNEL_EXIT_Y),
                (middle.x - bottom, BoardConfig.FUNNEL_EXIT_Y),
            ],
            fill=BoardConfig.FUNNEL_COLOR,
            outline=BoardConfig.OUTLINE_COLOR,
        )

    def _draw_pins(self, draw: ImageDraw.ImageDraw) -> None:
        for pin in self.machine.lattice.visible_pins():
            self._draw_circle(draw, pin.x, pin.y, pin.radius, BoardConfig.PIN_FILL_COLOR)

    def _draw_distribution(
        self, draw: ImageDraw.ImageDraw, overlay: HistogramOverlay
    ) -> None:
        for bar in overlay.bars:
            if bar.height > 0:
                draw.rectangle(
                    (bar.x, bar.y, bar.x + bar.width, bar.y + bar.height),
                    fill=BoardConfig.BAR_COLOR,
                    outline=BoardConfig.BAR_COLOR,
                )
        if len(overlay.curve) > 1:
            draw.line(
                list(overlay.curve),
                fill=BoardConfig.CURVE_COLOR,
                width=BoardConfig.CURVE_LINE_WIDTH,
            )
        for start, end in overlay.dividers:
            draw.line([start, end], fill=BoardConfig.OUTLINE_COLOR, width=1)
        for position, text in overlay.labels:
            draw.text(position, text, fill=BoardConfig.OUTLINE_COLOR)


def run_animation(
    machine: BeanMachine,
    num_frames: int,
    renderer: Optional[FrameRenderer] = None,
) -> List[Image.Image]:
    renderer = renderer if renderer is not None else FrameRenderer(machine)
    images: List[Image.Image] = []
    for _ in range(num_frames):
        frame = machine.tick()
        if frame is None:
            logging.info("Simulation paused; no further frames scheduled.")
            break
        # One byte per pixel for every frame held until save.
        images.append(
            renderer.render(frame).convert("P", palette=Image.Palette.ADAPTIVE)
        )
    logging.info(
        f"Rendered {len(images)} frames; {machine.distribution.total} beans in the bins."
    )
    return images


def save_animation(
    images: Sequence[Image.Image],
    filename: str | Path = BoardConfig.DEFAULT_ANIMATION_FILENAME,
    frame_delay: float = 1000 / (BoardConfig.DEFAULT_SPEED * 10),
) -> Path:
    if not images:
        raise ValueError("No frames to save.")
    out = Path(filename).resolve()
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        images[0].save(
            out,
            save_all=True,
            append_images=list(images[1:]),
            duration=max(1, round(frame_delay)),
            loop=0,
        )
    except (IOError, OSError) as e:
        logging.error(f"Failed to save animation to {out}: {e}.")
        raise
    logging.info(f"Animation saved: {out}")
    return out


def save_histogram(
    machine: BeanMachine,
    filename: str | Path = BoardConfig.DEFAULT_HISTOGRAM_FILENAME,
) -> Path:
    out = Path(filename).resolve()
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        FrameRenderer(machine).render().save(out)
    except (IOError, OSError) as e:
        logging.error(f"Failed to save histogram to {out}: {e}.")
        raise
    logging.info(f"Histogram saved: {out}")
    return out


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=BoardConfig.LOG_FORMAT, force=True)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Animate beans falling through a Galton box."
    )
    parser.add_argument(
        "--beans",
        type=int,
        default=BoardConfig.DEFAULT_BEANS,
        help="Number of beans to animate (default: %(default)s)",
    )
    parser.add_argument(
        "--bias",
        type=int,
        default=BoardConfig.FAIR_BIAS,
        help="Left/right bias from 1 to 10, 5 is fair (default: %(default)s)",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=BoardConfig.DEFAULT_SPEED,
        help="Animation speed from 1 to 10 (default: %(default)s)",
    )
    parser.add_argument(
        "--simulate",
        type=int,
        metavar="N",
        help="Drop N beans without animating and save the histogram as PNG",
    )
    parser.add_argument("--seed", type=int, help="Seed for the random generator")
    parser.add_argument("--output", type=Path, help="Output image path")
    parser.add_argument("--verbose", action="store_true", help="Log every bean")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        settings = Settings(bias=args.bias, speed=args.speed)
        machine = BeanMachine(settings, rng=random.Random(args.seed))
        if args.simulate is not None:
            machine.simulate(args.simulate)
            out = save_histogram(
                machine, args.output or BoardConfig.DEFAULT_HISTOGRAM_FILENAME
            )
        else:
            if args.beans <= 0:
                raise ValueError("Number of beans must be positive.")
            frames = args.beans * machine.controller.frames_per_bean()
            images = run_animation(machine, frames)
            out = save_animation(
                images,
                args.output or BoardConfig.DEFAULT_ANIMATION_FILENAME,
                settings.frame_delay,
            )
        stats = machine.distribution.compute_statistics()
        logging.info(
            f"Counts {machine.distribution.counts}; mode bin {stats.mode_column}; "
            f"deviation estimate {stats.standard_deviation:.3f}. Output: {out}"
        )
    except Exception as e:
        logging.exception(f"Fatal error: {e}.")
        raise


if __name__ == "__main__":
    main()
