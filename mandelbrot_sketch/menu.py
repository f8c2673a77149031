"""
Settings panel for the Mandelbrot sketch.

Sliders for max iterations and the escape threshold, a gray scale toggle,
a color scheme dropdown and a Generate button. Ranges and defaults come
from settings.json (see config.load_settings).
"""

import pygame

from .colormaps import COLORMAP_LABELS, list_colormap_names
from .config import load_settings


class Slider:
    """A horizontal integer slider."""

    KNOB_RADIUS = 7

    def __init__(self, x, y, width, min_value, max_value, value, step=1, label=""):
        self.x = x
        self.y = y
        self.width = width
        self.height = 16
        self.min_value = min_value
        self.max_value = max_value
        self.step = step
        self.label = label
        self.dragging = False
        self.value = self._clamp(value)

    def get_rect(self):
        """Hit area: the track plus room for the knob at both ends."""
        r = self.KNOB_RADIUS
        return pygame.Rect(self.x - r, self.y, self.width + 2 * r, self.height)

    def _clamp(self, value):
        steps = round((value - self.min_value) / self.step)
        value = self.min_value + steps * self.step
        return max(self.min_value, min(self.max_value, value))

    def show(self, value):
        """Display value as is, widening the range if it lies outside."""
        self.min_value = min(self.min_value, value)
        self.max_value = max(self.max_value, value)
        self.value = value

    def value_at(self, mx):
        """Slider value under screen x coordinate mx."""
        t = (mx - self.x) / self.width
        return self._clamp(self.min_value + t * (self.max_value - self.min_value))

    def x_for(self, value):
        """Screen x coordinate of the knob for a value."""
        t = (value - self.min_value) / (self.max_value - self.min_value)
        return self.x + int(round(t * self.width))

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                self.dragging = True
                return True, self._set(self.value_at(event.pos[0]))

        elif event.type == pygame.MOUSEMOTION and self.dragging:
            return True, self._set(self.value_at(event.pos[0]))

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self.dragging:
            self.dragging = False
            return True, False

        return False, False

    def _set(self, value):
        old = self.value
        self.value = value
        return old != value

    def draw(self, screen, font, small_font):
        label = small_font.render(f'{self.label}: {self.value}', True, (180, 180, 180))
        screen.blit(label, (self.x, self.y - 18))

        track = pygame.Rect(self.x, self.y + self.height // 2 - 2, self.width, 4)
        pygame.draw.rect(screen, (80, 80, 80), track)

        knob_x = self.x_for(self.value)
        knob_color = (140, 180, 220) if self.dragging else (200, 200, 200)
        pygame.draw.circle(screen, knob_color, (knob_x, self.y + self.height // 2), self.KNOB_RADIUS)


class Checkbox:
    """A labelled on/off toggle."""

    def __init__(self, x, y, checked=False, label=""):
        self.x = x
        self.y = y
        self.size = 16
        self.checked = checked
        self.label = label

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.size, self.size)

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                self.checked = not self.checked
                return True, True
        return False, False

    def draw(self, screen, font, small_font):
        rect = self.get_rect()
        pygame.draw.rect(screen, (55, 55, 55), rect)
        pygame.draw.rect(screen, (100, 100, 100), rect, 1)
        if self.checked:
            pygame.draw.rect(screen, (140, 200, 140), rect.inflate(-6, -6))

        text = small_font.render(self.label, True, (180, 180, 180))
        screen.blit(text, (self.x + self.size + 8, self.y + 1))


class Button:
    """A push button."""

    def __init__(self, x, y, width, height=26, label=""):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.label = label

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def handle_event(self, event):
        """Returns (handled, clicked)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                return True, True
        return False, False

    def draw(self, screen, font, small_font):
        rect = self.get_rect()
        pygame.draw.rect(screen, (70, 100, 70), rect)
        pygame.draw.rect(screen, (100, 150, 100), rect, 1)
        text = font.render(self.label, True, (220, 255, 220))
        screen.blit(text, (rect.x + (rect.width - text.get_width()) // 2,
                           rect.y + (rect.height - text.get_height()) // 2))


class Dropdown:
    """A dropdown/select component."""

    ITEM_HEIGHT = 22

    def __init__(self, x, y, width, options, selected_idx=0, labels=None):
        self.x = x
        self.y = y
        self.width = width
        self.height = 24
        self.options = options
        self.labels = labels or {}
        self.selected_idx = selected_idx
        self.expanded = False
        self.hovered_idx = -1

    def get_value(self):
        return self.options[self.selected_idx]

    def set_value(self, value):
        if value in self.options:
            self.selected_idx = self.options.index(value)

    def label_for(self, option):
        return self.labels.get(option, str(option))

    def get_rect(self):
        """Get the full rect including dropdown items when expanded."""
        if self.expanded:
            total_height = self.height + len(self.options) * self.ITEM_HEIGHT
            return pygame.Rect(self.x, self.y, self.width, total_height)
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def item_rect(self, idx):
        item_y = self.y + self.height + idx * self.ITEM_HEIGHT
        return pygame.Rect(self.x, item_y, self.width, self.ITEM_HEIGHT)

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            button_rect = pygame.Rect(self.x, self.y, self.width, self.height)
            if button_rect.collidepoint(event.pos):
                self.expanded = not self.expanded
                return True, False

            if self.expanded:
                for i in range(len(self.options)):
                    if self.item_rect(i).collidepoint(event.pos):
                        old_idx = self.selected_idx
                        self.selected_idx = i
                        self.expanded = False
                        return True, (old_idx != i)

                # Click outside dropdown - close it
                self.expanded = False
                return True, False

        elif event.type == pygame.MOUSEMOTION:
            self.hovered_idx = -1
            if self.expanded:
                for i in range(len(self.options)):
                    if self.item_rect(i).collidepoint(event.pos):
                        self.hovered_idx = i

        return False, False

    def draw(self, screen, font, small_font):
        button_rect = pygame.Rect(self.x, self.y, self.width, self.height)
        pygame.draw.rect(screen, (55, 55, 55), button_rect)
        pygame.draw.rect(screen, (100, 100, 100), button_rect, 1)

        text = small_font.render(self.label_for(self.get_value()), True, (220, 220, 220))
        screen.blit(text, (self.x + 8, self.y + 5))

        arrow = "v" if not self.expanded else "^"
        arrow_text = small_font.render(arrow, True, (150, 150, 150))
        screen.blit(arrow_text, (self.x + self.width - 18, self.y + 5))

        if self.expanded:
            for i, opt in enumerate(self.options):
                item_rect = self.item_rect(i)

                if i == self.selected_idx:
                    pygame.draw.rect(screen, (70, 100, 70), item_rect)
                elif i == self.hovered_idx:
                    pygame.draw.rect(screen, (65, 65, 65), item_rect)
                else:
                    pygame.draw.rect(screen, (50, 50, 50), item_rect)

                pygame.draw.rect(screen, (80, 80, 80), item_rect, 1)

                color = (255, 255, 255) if i == self.selected_idx else (180, 180, 180)
                text = small_font.render(self.label_for(opt), True, color)
                screen.blit(text, (self.x + 8, item_rect.y + 4))


class Menu:
    """
    Settings panel with sliders for max iterations and escape threshold,
    a gray scale toggle, a color scheme dropdown and a Generate button.

    Editing a widget only changes the panel state; the image is rebuilt
    when Generate is clicked (handle_event then reports need_generate).
    """

    TOGGLE_HEIGHT = 24

    def __init__(self, x, y, width=220, settings=None):
        self.x = x
        self.y = y
        self.width = width
        self.expanded = True

        self.font = None
        self.small_font = None

        config = settings or load_settings()
        iter_cfg = config['max_iterations']
        radius_cfg = config['escape_radius']
        colormap_options = config.get('colormap_options') or list_colormap_names()

        inner_x = x + 8
        inner_w = width - 16
        top = y + self.TOGGLE_HEIGHT + 30

        self.iter_slider = Slider(
            inner_x, top, inner_w,
            iter_cfg['min'], iter_cfg['max'], iter_cfg['default'],
            step=iter_cfg.get('step', 1), label='Max Iterations'
        )
        self.radius_slider = Slider(
            inner_x, top + 46, inner_w,
            radius_cfg['min'], radius_cfg['max'], radius_cfg['default'],
            step=radius_cfg.get('step', 1), label='Escape Threshold'
        )
        self.gray_checkbox = Checkbox(
            inner_x, top + 76, checked=bool(config.get('gray_scale', False)),
            label='Gray scale'
        )

        selected = config.get('colormap', colormap_options[0])
        self.color_dropdown = Dropdown(
            inner_x, top + 120, inner_w, colormap_options,
            colormap_options.index(selected) if selected in colormap_options else 0,
            labels=COLORMAP_LABELS
        )
        self.generate_button = Button(inner_x, top + 156, inner_w, label='Generate')

    @property
    def max_iter(self):
        return int(self.iter_slider.value)

    @property
    def escape_radius(self):
        return float(self.radius_slider.value)

    @property
    def gray_scale(self):
        return self.gray_checkbox.checked

    @property
    def colormap_name(self):
        return self.color_dropdown.get_value()

    def load_from(self, settings):
        """Show the values of a RenderSettings in the widgets."""
        self.iter_slider.show(settings.max_iterations)
        self.radius_slider.show(settings.escape_radius)
        self.gray_checkbox.checked = settings.grayscale
        self.color_dropdown.set_value(settings.colormap)

    def build_settings(self, base):
        """New RenderSettings from the panel values; other fields come from base."""
        return base.replace(
            max_iterations=self.max_iter,
            escape_radius=self.escape_radius,
            grayscale=self.gray_scale,
            colormap=self.colormap_name,
        )

    def init_fonts(self):
        pygame.font.init()
        self.font = pygame.font.SysFont('Arial', 14)
        self.small_font = pygame.font.SysFont('Arial', 12)

    def _toggle_rect(self):
        return pygame.Rect(self.x, self.y, 120, self.TOGGLE_HEIGHT)

    def get_rect(self):
        """Get the bounding rectangle of the menu."""
        if not self.expanded:
            return self._toggle_rect()

        bottom = self.generate_button.get_rect().bottom + 10
        if self.color_dropdown.expanded:
            bottom = max(bottom, self.color_dropdown.get_rect().bottom + 10)
        top = self.y + self.TOGGLE_HEIGHT + 4
        return pygame.Rect(self.x, top, self.width, bottom - top)

    def handle_event(self, event):
        """
        Handle a pygame event.
        Returns (handled, need_generate).
        """
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._toggle_rect().collidepoint(event.pos):
                self.expanded = not self.expanded
                return True, False

        if not self.expanded:
            return False, False

        # The expanded dropdown list overlaps the widgets below it
        handled, _ = self.color_dropdown.handle_event(event)
        if handled:
            return True, False

        for widget in (self.iter_slider, self.radius_slider, self.gray_checkbox):
            handled, _ = widget.handle_event(event)
            if handled:
                return True, False

        handled, clicked = self.generate_button.handle_event(event)
        if handled:
            return True, clicked

        if event.type == pygame.MOUSEBUTTONDOWN and self.get_rect().collidepoint(event.pos):
            return True, False

        return False, False

    def draw(self, screen):
        if self.font is None:
            self.init_fonts()

        self._draw_toggle_button(screen)

        if self.expanded:
            self._draw_expanded_menu(screen)

    def _draw_toggle_button(self, screen):
        toggle_rect = self._toggle_rect()
        pygame.draw.rect(screen, (60, 60, 60), toggle_rect)
        pygame.draw.rect(screen, (120, 120, 120), toggle_rect, 1)

        toggle_text = self.font.render('Toggle Settings', True, (200, 200, 200))
        screen.blit(toggle_text, (self.x + 8, self.y + 4))

    def _draw_expanded_menu(self, screen):
        menu_rect = self.get_rect()
        pygame.draw.rect(screen, (40, 40, 40), menu_rect)
        pygame.draw.rect(screen, (100, 100, 100), menu_rect, 1)

        self.iter_slider.draw(screen, self.font, self.small_font)
        self.radius_slider.draw(screen, self.font, self.small_font)
        self.gray_checkbox.draw(screen, self.font, self.small_font)

        label = self.small_font.render('Color Scheme:', True, (180, 180, 180))
        screen.blit(label, (self.color_dropdown.x, self.color_dropdown.y - 18))

        self.generate_button.draw(screen, self.font, self.small_font)
        # Last, so the open list covers the button
        self.color_dropdown.draw(screen, self.font, self.small_font)

    def point_in_menu(self, pos):
        """Check if a point is inside the menu."""
        return self._toggle_rect().collidepoint(pos) or (
            self.expanded and self.get_rect().collidepoint(pos)
        )
