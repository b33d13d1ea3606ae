"""Canned upstream payloads and a fake HTTP transport for tests."""

import httpx

DIARY_ROW = (
    "<tr>"
    "<td class='first'>{day}</td>"
    "<td class='first_in_group positive'>{temp_max}</td>"
    "<td>{pressure}</td>"
    "<td><img src='https://st.gismeteo.ru/static/diary/img/{icon}' class='screen_icon' /></td>"
    "<td></td>"
    "<td><span>З 3м/с</span></td>"
    "<td class='first_in_group'>{temp_min}</td>"
    "<td>748</td>"
    "<td><img src='https://st.gismeteo.ru/static/diary/img/sunc.png' class='screen_icon' /></td>"
    "<td></td>"
    "<td><span>ЮЗ 2м/с</span></td>"
    "</tr>"
)


def diary_row(day, temp_max='-1', pressure='750', icon='sun.png', temp_min='-5'):
    return DIARY_ROW.format(day=day, temp_max=temp_max, pressure=pressure, icon=icon, temp_min=temp_min)


def diary_page(rows):
    return (
        "<html><head><title>Дневник погоды</title></head><body>"
        "<table><thead><tr><th>Число</th><th>Температура</th><th>Давление</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        "</body></html>"
    )


def january_page(skip=()):
    """31 days of January with day 10 fixed at -3 / -9, 745 mmHg, half cloudy."""
    rows = []
    for day in range(1, 32):
        if day in skip:
            continue
        if day == 10:
            rows.append(diary_row(10, temp_max='-3', pressure='745', icon='suncl.png', temp_min='-9'))
        else:
            rows.append(diary_row(day))
    return diary_page(rows)


def mock_http_client(handler):
    """httpx client whose requests are answered by `handler(request)`."""
    return httpx.Client(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """Transport handler returning one canned response and recording requests."""

    def __init__(self, status_code=200, text=None, json=None):
        self.status_code = status_code
        self.text = text
        self.json = json
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.json is not None:
            return httpx.Response(self.status_code, json=self.json)
        return httpx.Response(self.status_code, text=self.text or '')
