"""
Tuning panel widgets for the Physarum viewer

Dark, minimal widgets drawn directly with pygame. Widgets only report
edits through callbacks; they never touch simulation state themselves.
"""

import pygame


THEME = {
    "bg": (10, 10, 14),
    "panel": (22, 22, 30),
    "track": (48, 48, 62),
    "track_fill": (120, 200, 170),
    "handle": (205, 215, 225),
    "handle_active": (255, 255, 255),
    "text": (175, 182, 192),
    "text_bright": (232, 236, 244),
    "text_dim": (98, 104, 116),
    "button": (38, 40, 52),
    "button_hover": (54, 58, 74),
    "button_active": (60, 130, 112),
    "divider": (40, 40, 54),
}


class Slider:
    """Labelled horizontal slider over [min_val, max_val].

    step snaps values (step=1 gives integers for u32 parameters).
    on_change(value) fires on every drag movement.
    """

    height = 36

    def __init__(self, x, y, width, label, min_val, max_val, value,
                 fmt=".3f", step=None, on_change=None):
        self.x = x
        self.y = y
        self.width = width
        self.label = label
        self.min_val = min_val
        self.max_val = max_val
        self.fmt = fmt
        self.step = step
        self.on_change = on_change
        self.value = max(min_val, min(max_val, value))
        self.dragging = False
        self.hovered = False

        self.track_x = x + 8
        self.track_w = width - 16
        self.track_y = y + 22

    @property
    def fraction(self):
        span = self.max_val - self.min_val
        if span <= 0:
            return 0.0
        return (self.value - self.min_val) / span

    def _handle_x(self):
        return self.track_x + self.fraction * self.track_w

    def _value_at(self, px):
        frac = min(1.0, max(0.0, (px - self.track_x) / self.track_w))
        val = self.min_val + frac * (self.max_val - self.min_val)
        if self.step:
            val = round(val / self.step) * self.step
        return val

    def _drag_to(self, px):
        self.value = self._value_at(px)
        if self.on_change:
            self.on_change(self.value)

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            mx, my = event.pos
            on_track = (self.track_x - 4 <= mx <= self.track_x + self.track_w + 4
                        and abs(my - self.track_y) <= 12)
            if on_track:
                self.dragging = True
                self._drag_to(mx)
                return True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION:
            mx, my = event.pos
            self.hovered = abs(mx - self._handle_x()) < 12 and abs(my - self.track_y) < 12
            if self.dragging:
                self._drag_to(mx)
                return True
        return False

    def set_value(self, val):
        """Move the handle without firing on_change."""
        self.value = max(self.min_val, min(self.max_val, val))

    def draw(self, surface, font):
        surface.blit(font.render(self.label, True, THEME["text"]), (self.x + 8, self.y + 2))
        val_surf = font.render(f"{self.value:{self.fmt}}", True, THEME["text_bright"])
        surface.blit(val_surf, (self.x + self.width - val_surf.get_width() - 8, self.y + 2))

        hx = self._handle_x()
        track = pygame.Rect(self.track_x, self.track_y - 2, self.track_w, 4)
        pygame.draw.rect(surface, THEME["track"], track, border_radius=2)
        fill = pygame.Rect(self.track_x, self.track_y - 2, hx - self.track_x, 4)
        pygame.draw.rect(surface, THEME["track_fill"], fill, border_radius=2)

        active = self.dragging or self.hovered
        color = THEME["handle_active"] if active else THEME["handle"]
        pygame.draw.circle(surface, color, (int(hx), self.track_y), 9 if self.dragging else 7)


class Button:
    def __init__(self, x, y, width, height, label, on_click=None):
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.on_click = on_click
        self.active = False
        self.hovered = False

    def handle_event(self, event):
        if event.type == pygame.MOUSEMOTION:
            self.hovered = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                if self.on_click:
                    self.on_click()
                return True
        return False

    def draw(self, surface, font):
        if self.active:
            color = THEME["button_active"]
        elif self.hovered:
            color = THEME["button_hover"]
        else:
            color = THEME["button"]
        pygame.draw.rect(surface, color, self.rect, border_radius=4)
        text = font.render(self.label, True, THEME["text_bright"])
        surface.blit(text, text.get_rect(center=self.rect.center))


class ButtonRow:
    """Wrapping row of mutually exclusive buttons.

    selected=None means nothing chosen yet. on_select(index, label).
    """

    def __init__(self, x, y, width, labels, selected=None, on_select=None, btn_height=26):
        self.labels = list(labels)
        self.on_select = on_select
        self.buttons = []

        bx, by, gap = x, y, 4
        for label in self.labels:
            bw = max(len(label) * 8 + 16, 50)
            if bx + bw > x + width and bx > x:
                bx, by = x, by + btn_height + gap
            self.buttons.append(Button(bx, by, bw, btn_height, label))
            bx += bw + gap
        self.height = by - y + btn_height
        self.select(selected)

    def select(self, index):
        self.selected = index
        for i, btn in enumerate(self.buttons):
            btn.active = (i == index)

    def handle_event(self, event):
        for i, btn in enumerate(self.buttons):
            if btn.handle_event(event):
                self.select(i)
                if self.on_select:
                    self.on_select(i, self.labels[i])
                return True
        return False

    def draw(self, surface, font):
        for btn in self.buttons:
            btn.draw(surface, font)


class SectionHeader:
    height = 24

    def __init__(self, x, y, width, title):
        self.x = x
        self.y = y
        self.width = width
        self.title = title

    def draw(self, surface, font):
        pygame.draw.line(surface, THEME["divider"],
                         (self.x + 8, self.y + 8), (self.x + self.width - 8, self.y + 8))
        surface.blit(font.render(self.title, True, THEME["text_dim"]), (self.x + 8, self.y + 12))


class ControlPanel:
    """Vertical stack of widgets drawn at (x, y) on the window."""

    def __init__(self, x, y, width, height):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.widgets = []
        self._cursor_y = 8

    def _push(self, widget, advance):
        self.widgets.append(widget)
        self._cursor_y += advance
        return widget

    def add_section(self, title):
        return self._push(SectionHeader(0, self._cursor_y, self.width, title),
                          SectionHeader.height + 4)

    def add_slider(self, label, min_val, max_val, value, fmt=".3f", step=None, on_change=None):
        slider = Slider(0, self._cursor_y, self.width, label, min_val, max_val, value,
                        fmt, step, on_change)
        return self._push(slider, Slider.height + 6)

    def add_button_row(self, labels, selected=None, on_select=None):
        row = ButtonRow(8, self._cursor_y, self.width - 16, labels, selected, on_select)
        return self._push(row, row.height + 8)

    def add_button(self, label, on_click=None):
        return self._push(Button(8, self._cursor_y, self.width - 16, 28, label, on_click), 36)

    def handle_event(self, event):
        """Route an event to widgets in panel-local coordinates."""
        if hasattr(event, "pos"):
            lx, ly = event.pos[0] - self.x, event.pos[1] - self.y
            if not (0 <= lx <= self.width and 0 <= ly <= self.height):
                # Releasing outside the panel still ends a drag
                if event.type == pygame.MOUSEBUTTONUP:
                    for widget in self.widgets:
                        if isinstance(widget, Slider):
                            widget.dragging = False
                return False
            attrs = dict(event.__dict__, pos=(lx, ly))
            event = pygame.event.Event(event.type, attrs)

        for widget in self.widgets:
            if hasattr(widget, "handle_event") and widget.handle_event(event):
                return True
        return False

    def draw(self, target, font):
        surface = pygame.Surface((self.width, self.height))
        surface.fill(THEME["panel"])
        pygame.draw.line(surface, THEME["divider"], (0, 0), (0, self.height))
        for widget in self.widgets:
            widget.draw(surface, font)
        target.blit(surface, (self.x, self.y))
