from shaderprog._tokenizer import tokenize_line, token_is_comment


def texts(line):
    return [t.text for t in tokenize_line(line)]


def test_tokenize_whitespace():
    assert texts("  #pragma   anki\tmutator  FOO 0 1 ") == [
        "#pragma",
        "anki",
        "mutator",
        "FOO",
        "0",
        "1",
    ]
    assert tokenize_line("") == []
    assert tokenize_line("   \t ") == []


def test_tokenize_spans():
    tokens = tokenize_line("ab  cd")
    assert [(t.start, t.end) for t in tokens] == [(0, 2), (4, 6)]
    assert not any(t.quoted for t in tokens)


def test_tokenize_quoted():
    tokens = tokenize_line('#include "my file.glsl"')
    assert len(tokens) == 2
    token = tokens[1]
    assert token.text == "my file.glsl"
    assert token.quoted
    # The span includes the quotes
    assert (token.start, token.end) == (9, 23)

    # Unterminated quotes run to the end of the line
    tokens = tokenize_line('x "abc def')
    assert [t.text for t in tokens] == ["x", "abc def"]
    assert tokens[1].quoted

    # Empty quoted string
    tokens = tokenize_line('x ""')
    assert tokens[1].text == ""
    assert tokens[1].quoted


def test_tokenize_comments():
    assert texts("#pragma anki end // done") == ["#pragma", "anki", "end"]
    assert texts("#pragma anki end /* done */") == ["#pragma", "anki", "end"]
    assert texts("// just a comment") == []
    assert texts("/* c */ foo") == []

    # Quoted tokens never start a comment
    assert texts('"//not a comment" x') == ["//not a comment", "x"]


def test_token_is_comment():
    assert token_is_comment("//")
    assert token_is_comment("//foo")
    assert token_is_comment("/*")
    assert not token_is_comment("/")
    assert not token_is_comment("a//")


if __name__ == "__main__":
    test_tokenize_whitespace()
    test_tokenize_spans()
    test_tokenize_quoted()
    test_tokenize_comments()
    test_token_is_comment()
